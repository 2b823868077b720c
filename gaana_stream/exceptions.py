"""
Defines custom exceptions for the application to allow for more specific error handling.

Every failure in the resolution pipeline is a subclass of `GaanaStreamError`,
grouped by the stage that raised it so callers can log where a resolution
stopped without inspecting messages.
"""


class GaanaStreamError(Exception):
    """Base exception for all application-specific errors."""

    stage = "unknown"


class ConfigurationError(GaanaStreamError):
    """Raised for issues related to configuration loading or validation."""

    stage = "config"


class UpstreamLookupError(GaanaStreamError):
    """Raised when the stream-url lookup cannot be completed (network, HTTP or circuit)."""

    stage = "lookup"


class DecryptionError(GaanaStreamError):
    """Base class for failures while recovering the HLS path from a stream token."""

    stage = "decrypt"


class MalformedTokenError(DecryptionError):
    """Raised when the token offset digit or its Base64 payload is invalid."""


class CipherError(DecryptionError):
    """Raised when the ciphertext is not block-aligned or cannot be decrypted."""


class PathMarkerNotFoundError(DecryptionError):
    """Raised when the decrypted text does not contain the HLS path marker."""


class ManifestError(GaanaStreamError):
    """Base class for failures while fetching or parsing an HLS manifest."""

    stage = "manifest"


class FetchFailureError(ManifestError):
    """Raised when a playlist fetch fails with a network error or non-2xx status."""

    def __init__(self, message: str, url: str = "", status: int | None = None):
        super().__init__(message)
        self.url = url
        self.status = status


class EmptyManifestError(ManifestError):
    """Raised when a fetched playlist contains no lines."""


class NoSegmentsFoundError(ManifestError):
    """Raised when a media playlist yields no playable segments."""


class NoStreamAvailableError(UpstreamLookupError):
    """Raised when the lookup answers but has no stream for the track and quality."""


class UnsupportedQualityError(UpstreamLookupError):
    """Raised when the requested quality is not one the endpoint accepts."""
