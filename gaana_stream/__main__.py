"""
Console entry point for gaana-stream.

Logging is configured by `gaana_stream.cli.app`; this module only turns errors
that escape a command into an error panel and a non-zero exit code.
"""

import logging
import sys

from rich.console import Console

from gaana_stream.cli.app import app
from gaana_stream.cli.formatters import format_error_with_suggestions
from gaana_stream.exceptions import GaanaStreamError

log = logging.getLogger("gaana_stream")


def main() -> None:
    # Typer's standalone mode already handles Exit, Abort and Ctrl-C
    try:
        app()
    except GaanaStreamError as e:
        Console(stderr=True).print(format_error_with_suggestions(e))
        sys.exit(1)
    except Exception as e:
        Console(stderr=True).print(
            format_error_with_suggestions(e, {"type": "Unexpected"})
        )
        log.debug("Full traceback:", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
