"""
Resolves a track id and quality into a playback descriptor.

This is the only entry point callers need: it looks up the encrypted stream
path, decrypts it, walks the HLS playlists and assembles the result. Every
failure along the way is logged with its stage and reported as `None`.
"""

import logging
from typing import List, Optional

from gaana_stream.api.client import GaanaAPIClient
from gaana_stream.exceptions import (
    GaanaStreamError,
    NoStreamAvailableError,
    UnsupportedQualityError,
)
from gaana_stream.models.config import Quality
from gaana_stream.models.stream import PlaybackDescriptor
from gaana_stream.utils.structured_logger import (
    ResolutionLogger,
    create_resolution_logger,
)

from .decryptor import PathDecryptor
from .manifest import ManifestResolver

log = logging.getLogger(__name__)

# Checked in order; the first matching extension wins
_CONTAINER_FORMATS = ("m4s", "mp4", "ts", "aac")
DEFAULT_CONTAINER_FORMAT = "m4a"


def detect_container_format(segment_url: str) -> str:
    """Classifies a segment URL by its file extension, defaulting to m4a."""
    path = segment_url.split("?", 1)[0].lower()
    for container in _CONTAINER_FORMATS:
        if path.endswith(f".{container}"):
            return container
    return DEFAULT_CONTAINER_FORMAT


class StreamResolver:
    """
    Orchestrates lookup, decryption and manifest resolution for one track.

    Holds no per-call state, so a single instance can serve concurrent
    resolutions.
    """

    def __init__(
        self,
        api_client: GaanaAPIClient,
        decryptor: PathDecryptor,
        manifest_resolver: Optional[ManifestResolver] = None,
        resolution_logger: Optional[ResolutionLogger] = None,
    ):
        self.api_client = api_client
        self.decryptor = decryptor
        self.manifest_resolver = manifest_resolver or ManifestResolver(
            api_client.fetch_text
        )
        self.events = resolution_logger or create_resolution_logger()

    async def resolve_or_raise(
        self, track_id: str, quality: Quality | str = Quality.HIGH
    ) -> PlaybackDescriptor:
        """
        Runs the full pipeline for one quality, propagating the failure.

        Raises:
            UnsupportedQualityError: The quality is not high, medium or low.
            NoStreamAvailableError: The service has no stream for this quality.
            GaanaStreamError: Any lookup, decryption or manifest failure.
        """
        try:
            quality = Quality(quality)
        except ValueError as e:
            raise UnsupportedQualityError(f"Unknown quality: {quality!r}") from e

        lookup = await self.api_client.lookup_stream(track_id, quality)
        if lookup is None:
            raise NoStreamAvailableError(
                f"No stream available for track {track_id} "
                f"at {quality.value} quality."
            )

        hls_url = self.decryptor.decrypt(lookup.stream_path)
        log.debug(f"Decrypted stream path for track {track_id}: {hls_url}")

        manifest = await self.manifest_resolver.resolve(hls_url)

        first_segment_url = manifest.segments[0].url
        return PlaybackDescriptor(
            quality=quality.value,
            bit_rate=lookup.bit_rate,
            manifest_url=hls_url,
            first_segment_url=first_segment_url,
            init_segment_url=manifest.init_segment_url,
            segments=manifest.segments,
            total_duration_ms=manifest.total_duration_ms,
            format=detect_container_format(first_segment_url),
        )

    async def resolve_playback(
        self, track_id: str, quality: Quality | str = Quality.HIGH
    ) -> Optional[PlaybackDescriptor]:
        """
        Resolves playback info for a track at the requested quality only.

        Returns:
            The descriptor, or None if any stage fails. There is no automatic
            downgrade; call again with a lower quality to try it.
        """
        label = quality.value if isinstance(quality, Quality) else str(quality)
        try:
            descriptor = await self.resolve_or_raise(track_id, quality)
        except NoStreamAvailableError:
            self.events.lookup_empty(track_id, label)
            return None
        except GaanaStreamError as e:
            self.events.resolution_failed(track_id, label, e)
            return None

        self.events.resolved(
            track_id,
            descriptor.quality,
            len(descriptor.segments),
            descriptor.total_duration_ms,
            descriptor.format,
        )
        return descriptor

    async def get_media_urls(self, track_id: str) -> List[PlaybackDescriptor]:
        """
        Collects playback descriptors for a track, best quality first.

        Only the top quality is attempted; if it resolves, that is enough.
        """
        descriptor = await self.resolve_playback(track_id, Quality.ordered()[0])
        return [descriptor] if descriptor else []
