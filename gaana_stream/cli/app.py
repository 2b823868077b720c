"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import json
import logging
import os
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from gaana_stream import __version__
from gaana_stream.api.client import GaanaAPIClient
from gaana_stream.exceptions import ConfigurationError, GaanaStreamError
from gaana_stream.models.config import Quality, StreamConfig
from gaana_stream.storage.config_manager import ConfigManager
from gaana_stream.stream import ManifestResolver, PathDecryptor, StreamResolver
from gaana_stream.utils.structured_logger import create_resolution_logger

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_manifest,
    print_playback_summary,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("gaana_stream")

app = typer.Typer(
    name="gaana-stream",
    help=(
        "Resolve Gaana tracks into playable HLS segment lists. Use 'gaana-stream"
        " <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "gaana-stream"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> StreamConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except ConfigurationError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration file."
    ),
):
    """Gaana Stream Resolver CLI"""
    if version:
        console.print(f"[bold]gaana-stream[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "WARNING"
    if verbose == 1:
        log_level = "INFO"
    elif verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("gaana_stream").setLevel(log_level)

    if show_config:
        print_config(CONFIG_FILE, ConfigManager(CONFIG_FILE).get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file with the default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except GaanaStreamError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


@app.command()
def validate():
    """Validate the current configuration."""
    config = _load_config()
    print_validation_table(config)


@app.command()
def resolve(
    track_id: str = typer.Argument(..., help="Numeric Gaana track id."),
    quality: Quality | None = typer.Option(
        None,
        "-q",
        "--quality",
        case_sensitive=False,
        help="Quality to request. No automatic downgrade is attempted.",
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print the descriptor as JSON instead of a table."
    ),
    segments: bool = typer.Option(
        False, "--segments", help="List every segment in the summary."
    ),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Also write resolution events as JSON lines here."
    ),
):
    """Resolve a track into its HLS segment list."""
    cli_options = {"quality": quality} if quality else {}
    config = _load_config(cli_options)

    async def _resolve_async():
        async with GaanaAPIClient(config) as api_client:
            resolver = StreamResolver(
                api_client,
                PathDecryptor(config.cipher_settings()),
                resolution_logger=create_resolution_logger(log_dir),
            )
            try:
                return await resolver.resolve_or_raise(track_id, config.quality)
            except GaanaStreamError as e:
                resolver.events.resolution_failed(track_id, config.quality.value, e)
                raise
            finally:
                resolver.events.logger.close()

    try:
        descriptor = asyncio.run(_resolve_async())
    except GaanaStreamError as e:
        console.print(format_error_with_suggestions(e, {"track_id": track_id}))
        raise typer.Exit(code=1) from e

    if as_json:
        console.print_json(json.dumps(descriptor.to_response()))
    else:
        print_playback_summary(track_id, descriptor, show_segments=segments)


@app.command()
def decrypt(
    token: str = typer.Argument(..., help="Encrypted stream_path value."),
):
    """Decrypt a stream token into its HLS playlist URL."""
    config = _load_config()
    try:
        hls_url = PathDecryptor(config.cipher_settings()).decrypt(token)
    except GaanaStreamError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(hls_url, markup=False, highlight=False, soft_wrap=True)


@app.command()
def manifest(
    url: str = typer.Argument(..., help="Master or media playlist URL."),
    as_json: bool = typer.Option(False, "--json", help="Print the manifest as JSON."),
):
    """Fetch and parse an HLS playlist."""
    config = _load_config()

    async def _manifest_async():
        async with GaanaAPIClient(config) as api_client:
            return await ManifestResolver(api_client.fetch_text).resolve(url)

    try:
        result = asyncio.run(_manifest_async())
    except GaanaStreamError as e:
        console.print(format_error_with_suggestions(e, {"url": url}))
        raise typer.Exit(code=1) from e

    if as_json:
        console.print_json(
            json.dumps(
                {
                    "initUrl": result.init_segment_url,
                    "segments": [s.to_response() for s in result.segments],
                    "durationMs": result.total_duration_ms,
                }
            )
        )
    else:
        print_manifest(url, result)
