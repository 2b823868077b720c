"""
Fetches and parses the HLS playlists served for a decrypted stream path.

The service publishes a master playlist that points at a single media
playlist; some tracks skip the master and serve the media playlist directly.
Resolution walks at most those two levels.
"""

import logging
import math
import re
from typing import Awaitable, Callable, List, Optional

from gaana_stream.exceptions import EmptyManifestError, NoSegmentsFoundError
from gaana_stream.models.stream import DEFAULT_SEGMENT_DURATION_MS, Manifest, Segment

from .urls import resolve_url

log = logging.getLogger(__name__)

FetchText = Callable[[str], Awaitable[str]]

_NESTED_PLAYLIST_REGEX = re.compile(r"\.m3u8(\?|$)")
_SEGMENT_REGEX = re.compile(r"\.(ts|m4s|mp4|m4a|aac)(\?|$)", re.IGNORECASE)
_MAP_URI_REGEX = re.compile(r'URI="([^"]+)"')
_LEADING_FLOAT_REGEX = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_MAP_DIRECTIVE = "#EXT-X-MAP:"
_INF_DIRECTIVE = "#EXTINF:"


def split_lines(text: str) -> List[str]:
    """Splits playlist text into stripped lines, or [] if nothing but whitespace."""
    lines = [line.strip() for line in text.split("\n")]
    return lines if any(lines) else []


def find_nested_playlist(playlist_url: str, lines: List[str]) -> Optional[str]:
    """Returns the resolved URL of the first nested .m3u8 reference, if any."""
    for line in lines:
        if line and not line.startswith("#") and _NESTED_PLAYLIST_REGEX.search(line):
            return resolve_url(playlist_url, line)
    return None


def parse_duration_ms(directive: str) -> int:
    """
    Parses the seconds value of an #EXTINF directive into milliseconds.

    Unparsable, zero or negative values fall back to the 6000 ms default
    rather than failing the whole playlist.
    """
    value = directive[len(_INF_DIRECTIVE) :].split(",", 1)[0]
    match = _LEADING_FLOAT_REGEX.match(value)
    if not match:
        return DEFAULT_SEGMENT_DURATION_MS
    scaled = float(match.group(1)) * 1000 + 0.5
    if not math.isfinite(scaled):
        return DEFAULT_SEGMENT_DURATION_MS
    duration_ms = math.floor(scaled)
    if duration_ms <= 0:
        return DEFAULT_SEGMENT_DURATION_MS
    return duration_ms


def parse_media_playlist(playlist_url: str, lines: List[str]) -> Manifest:
    """
    Builds a Manifest from the lines of a media playlist.

    Each #EXTINF duration applies only to the next URI line. Unknown
    directives and non-media lines are skipped.

    Raises:
        NoSegmentsFoundError: If no line references a media segment.
    """
    init_segment_url: Optional[str] = None
    segments: List[Segment] = []
    pending_duration_ms = DEFAULT_SEGMENT_DURATION_MS

    for line in lines:
        if not line:
            continue

        if line.startswith("#"):
            if line.startswith(_MAP_DIRECTIVE):
                if match := _MAP_URI_REGEX.search(line):
                    init_segment_url = resolve_url(playlist_url, match.group(1))
            elif line.startswith(_INF_DIRECTIVE):
                pending_duration_ms = parse_duration_ms(line)
            continue

        if _SEGMENT_REGEX.search(line):
            segments.append(
                Segment(
                    url=resolve_url(playlist_url, line),
                    duration_ms=pending_duration_ms,
                )
            )
        pending_duration_ms = DEFAULT_SEGMENT_DURATION_MS

    if not segments:
        raise NoSegmentsFoundError(f"No segments found in HLS playlist: {playlist_url}")

    return Manifest(init_segment_url=init_segment_url, segments=segments)


class ManifestResolver:
    """
    Resolves a master or media playlist URL into an ordered segment list.

    The fetch primitive is injected; it must raise FetchFailureError on
    network errors and non-2xx responses.
    """

    def __init__(self, fetch_text: FetchText):
        self._fetch_text = fetch_text

    async def _fetch_lines(self, url: str) -> List[str]:
        lines = split_lines(await self._fetch_text(url))
        if not lines:
            raise EmptyManifestError(f"Empty HLS playlist: {url}")
        return lines

    async def resolve(self, manifest_url: str) -> Manifest:
        """
        Fetches `manifest_url` and, when it is a master playlist, the media
        playlist it references, returning the parsed Manifest.
        """
        playlist_url = manifest_url
        lines = await self._fetch_lines(playlist_url)

        # If no nested playlist is referenced, the master is the media playlist
        nested_url = find_nested_playlist(playlist_url, lines)
        if nested_url:
            log.debug(f"Following nested playlist: {nested_url}")
            playlist_url = nested_url
            lines = await self._fetch_lines(playlist_url)

        manifest = parse_media_playlist(playlist_url, lines)
        log.debug(
            f"Parsed {len(manifest.segments)} segments "
            f"({manifest.total_duration_ms} ms) from {playlist_url}"
        )
        return manifest
