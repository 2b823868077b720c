"""
Data Models Layer.

This package contains Pydantic models that define the core data structures
used throughout the application, such as configuration and resolved streams.
"""

from .config import CipherSettings, Quality, StreamConfig
from .stream import Manifest, PlaybackDescriptor, Segment, StreamLookup

__all__ = [
    "CipherSettings",
    "Manifest",
    "PlaybackDescriptor",
    "Quality",
    "Segment",
    "StreamConfig",
    "StreamLookup",
]
