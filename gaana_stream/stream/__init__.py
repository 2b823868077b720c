"""
Stream Resolution Layer.

Turns an encrypted stream token into a playable HLS segment list:
`PathDecryptor` recovers the playlist URL, `ManifestResolver` walks the
playlists, and `StreamResolver` ties both to the upstream lookup.
"""

from .decryptor import PathDecryptor
from .manifest import ManifestResolver
from .resolver import StreamResolver, detect_container_format
from .urls import base_path, resolve_url

__all__ = [
    "ManifestResolver",
    "PathDecryptor",
    "StreamResolver",
    "base_path",
    "detect_container_format",
    "resolve_url",
]
