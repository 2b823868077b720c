"""
Structured logging for stream resolutions.
Provides JSON-formatted logs with context alongside the regular console output.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Logger that writes human-readable console lines and, optionally, one JSON
    object per event to a `.jsonl` file.

    Usage:
        logger = StructuredLogger("gaana_stream")
        logger.info("stream_resolved", track_id="12345", segments=42)
    """

    def __init__(self, name: str, log_dir: Path | None = None):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = console only)
        """
        self.name = name
        self._logger = logging.getLogger(name)

        self._json_file = None
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            json_log_path = log_dir / f"gaana_stream_{timestamp}.jsonl"
            self._json_file = open(json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
        }

    def _format_message(self, event: str, **context) -> str:
        parts = [f"[{event}]"]
        parts.extend(f"{key}={value}" for key, value in context.items())
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }
        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except OSError as e:
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _log(self, level: int, event: str, **context) -> None:
        # Rich markup in values would be interpreted by RichHandler
        self._logger.log(
            level, self._format_message(event, **context), extra={"markup": False}
        )
        self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        self._log(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        self._log(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        self._log(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        self._log(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class ResolutionLogger:
    """Events emitted while resolving a track into a playback descriptor."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def lookup_empty(self, track_id: str, quality: str):
        """The upstream answered but had no stream for this track and quality."""
        self.logger.info("stream_lookup_empty", track_id=track_id, quality=quality)

    def resolution_failed(self, track_id: str, quality: str, error: Exception):
        """A pipeline stage failed; records which one and why."""
        self.logger.warning(
            "stream_resolution_failed",
            track_id=track_id,
            quality=quality,
            stage=getattr(error, "stage", "unknown"),
            error_type=type(error).__name__,
            error=str(error),
        )

    def resolved(
        self,
        track_id: str,
        quality: str,
        segment_count: int,
        duration_ms: int,
        container: str,
    ):
        self.logger.debug(
            "stream_resolved",
            track_id=track_id,
            quality=quality,
            segments=segment_count,
            duration_ms=duration_ms,
            format=container,
        )


def create_resolution_logger(log_dir: Path | None = None) -> ResolutionLogger:
    """Creates the resolution logger, optionally mirrored to a JSON-lines file."""
    base = StructuredLogger("gaana_stream.resolution", log_dir=log_dir)
    return ResolutionLogger(base)
