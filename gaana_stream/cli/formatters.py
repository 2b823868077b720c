"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gaana_stream.models.config import StreamConfig, get_quality_info
from gaana_stream.models.stream import Manifest, PlaybackDescriptor
from gaana_stream.utils.formatting import format_duration_ms, shorten_url

_SUGGESTIONS = {
    "NoStreamAvailableError": [
        "• The track may not be available at this quality.",
        "• Try a lower quality with `-q medium` or `-q low`.",
        "• Check the track id on gaana.com.",
    ],
    "UnsupportedQualityError": [
        "• Use one of `high`, `medium` or `low`.",
    ],
    "UpstreamLookupError": [
        "• A network connection issue occurred.",
        "• The Gaana API might be temporarily unavailable.",
        "• Please try again in a few minutes.",
    ],
    "MalformedTokenError": [
        "• The stream token is truncated or not in the expected layout.",
    ],
    "CipherError": [
        "• The token could not be decrypted with the configured key and IV.",
        "• Check `aes_key` and `aes_iv` with `gaana-stream validate`.",
    ],
    "PathMarkerNotFoundError": [
        "• The key or IV may be outdated; decryption produced no HLS path.",
        "• Check `aes_key`, `aes_iv` and `path_marker` in the configuration.",
    ],
    "FetchFailureError": [
        "• The CDN refused or failed the playlist request.",
        "• Stream URLs can expire; resolve the track again.",
    ],
    "EmptyManifestError": [
        "• The CDN returned an empty playlist. Try again later.",
    ],
    "NoSegmentsFoundError": [
        "• The playlist contains no supported media segments.",
    ],
    "ConfigurationError": [
        "• Fix the reported value in the configuration file.",
        "• Run `gaana-stream init --force` to write a fresh default config.",
    ],
}


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    suggestions = _SUGGESTIONS.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(str(error))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    if stage := getattr(error, "stage", None):
        content.add_row(Text(f"Failed stage: {stage}", style="yellow"))
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the raw configuration, hiding key material."""
    console = Console()
    content = ""
    for key, value in sorted(config_data.items()):
        if key in ("aes_key", "aes_iv"):
            value = "[hidden]"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip() or "[dim](defaults)[/dim]",
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: StreamConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    quality_info = get_quality_info(config.quality)
    table.add_row("Quality:", f"[{quality_info['color']}]{quality_info['name']}[/]")
    table.add_row("Lookup URL:", f"[dim]{config.lookup_url}[/dim]")
    table.add_row("Stream Format:", config.stream_format)
    table.add_row("HLS Base URL:", f"[dim]{config.hls_base_url}[/dim]")
    table.add_row("Path Marker:", config.path_marker)
    table.add_row("Request Timeout:", f"{config.request_timeout:g}s")
    table.add_row(
        "Circuit Breaker:",
        f"{config.failure_threshold} failures / {config.recovery_timeout}s",
    )

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def _segments_table(manifest_segments, title: str) -> Table:
    table = Table(title=title, box=box.ROUNDED)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Duration", justify="right", style="green")
    table.add_column("URL", style="cyan", overflow="fold")
    for i, segment in enumerate(manifest_segments, 1):
        table.add_row(
            str(i), format_duration_ms(segment.duration_ms), shorten_url(segment.url)
        )
    return table


def print_playback_summary(
    track_id: str, descriptor: PlaybackDescriptor, show_segments: bool = False
):
    """Displays a resolved playback descriptor."""
    console = Console()
    quality_info = get_quality_info(descriptor.quality)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column()
    table.add_row("Track:", track_id)
    table.add_row(
        "Quality:", f"[{quality_info['color']}]{quality_info['name']}[/]"
    )
    table.add_row("Bit Rate:", descriptor.bit_rate or "[dim]unknown[/dim]")
    table.add_row("Format:", descriptor.format)
    table.add_row("Segments:", str(len(descriptor.segments)))
    table.add_row("Duration:", format_duration_ms(descriptor.total_duration_ms))
    table.add_row("HLS URL:", f"[dim]{descriptor.manifest_url}[/dim]")
    table.add_row("First Segment:", f"[dim]{descriptor.first_segment_url}[/dim]")
    if descriptor.init_segment_url:
        table.add_row("Init Segment:", f"[dim]{descriptor.init_segment_url}[/dim]")

    console.print(
        Panel(
            table,
            title="🎵 [bold]Stream Resolved[/bold]",
            border_style="green",
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    if show_segments:
        console.print(_segments_table(descriptor.segments, "Segments"))


def print_manifest(manifest_url: str, manifest: Manifest):
    """Displays a parsed manifest and its segment list."""
    console = Console()
    console.print(f"[bold]Manifest:[/bold] [dim]{manifest_url}[/dim]")
    if manifest.init_segment_url:
        console.print(f"[bold]Init segment:[/bold] {manifest.init_segment_url}")
    console.print(
        _segments_table(
            manifest.segments,
            f"{len(manifest.segments)} segments, "
            f"{format_duration_ms(manifest.total_duration_ms)}",
        )
    )
