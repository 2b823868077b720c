"""
Immutable models describing a resolved stream: segments, manifests and the
playback descriptor handed to callers.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_SEGMENT_DURATION_MS = 6000


class Segment(BaseModel):
    """One fetchable unit of media with its playback duration."""

    model_config = ConfigDict(frozen=True)

    url: str
    duration_ms: int = Field(DEFAULT_SEGMENT_DURATION_MS, ge=0)

    def to_response(self) -> dict[str, Any]:
        return {"url": self.url, "durationMs": self.duration_ms}


class Manifest(BaseModel):
    """The ordered segment list recovered from a media playlist."""

    model_config = ConfigDict(frozen=True)

    init_segment_url: Optional[str] = None
    segments: tuple[Segment, ...] = ()
    total_duration_ms: int = 0

    @model_validator(mode="before")
    @classmethod
    def fill_total_duration(cls, data: Any) -> Any:
        """Derives the total from the segments when it is not given explicitly."""
        if isinstance(data, dict) and "total_duration_ms" not in data:
            segments = data.get("segments") or ()
            data = {
                **data,
                "total_duration_ms": sum(
                    s.duration_ms if isinstance(s, Segment) else s["duration_ms"]
                    for s in segments
                ),
            }
        return data

    @model_validator(mode="after")
    def validate_total_duration(self) -> "Manifest":
        expected = sum(s.duration_ms for s in self.segments)
        if self.total_duration_ms != expected:
            raise ValueError(
                f"total_duration_ms ({self.total_duration_ms}) does not match "
                f"the sum of segment durations ({expected})."
            )
        return self


class StreamLookup(BaseModel):
    """The `data` block of a successful stream-url response."""

    model_config = ConfigDict(frozen=True)

    stream_path: str = Field(..., min_length=1)
    bit_rate: str = ""
    track_format: str = ""


class PlaybackDescriptor(BaseModel):
    """
    Everything a caller needs to play one track at one quality.

    Built once per successful resolution and never mutated; `to_response()`
    produces the JSON shape the API layer returns.
    """

    model_config = ConfigDict(frozen=True)

    quality: str
    bit_rate: str
    manifest_url: str
    first_segment_url: str
    init_segment_url: Optional[str] = None
    segments: tuple[Segment, ...] = Field(..., min_length=1)
    total_duration_ms: int
    format: str

    def to_response(self) -> dict[str, Any]:
        """Serializes the descriptor with the API's camelCase keys."""
        response: dict[str, Any] = {
            "quality": self.quality,
            "bitRate": self.bit_rate,
            "hlsUrl": self.manifest_url,
            "url": self.first_segment_url,
            "segments": [s.to_response() for s in self.segments],
            "durationMs": self.total_duration_ms,
            "format": self.format,
        }
        if self.init_segment_url:
            response["initUrl"] = self.init_segment_url
        return response
