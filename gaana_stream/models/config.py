"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_AES_KEY = "gy1t#b@jl(b$wtme"
DEFAULT_AES_IV = "xC4dmVJAq14BfntX"
DEFAULT_HLS_BASE_URL = "https://vodhlsgaana-ebw.akamaized.net/"
DEFAULT_LOOKUP_URL = "https://gaana.com/api/stream-url"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)


class Quality(str, Enum):
    """Audio quality levels accepted by the stream-url endpoint, best first."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def ordered(cls) -> list["Quality"]:
        return [cls.HIGH, cls.MEDIUM, cls.LOW]


# Display metadata for each quality level
QUALITY_MAP = {
    Quality.HIGH: {"name": "High", "short": "high", "color": "green"},
    Quality.MEDIUM: {"name": "Medium", "short": "medium", "color": "cyan"},
    Quality.LOW: {"name": "Low", "short": "low", "color": "yellow"},
}


def get_quality_info(quality: Quality | str) -> dict[str, str]:
    """Gets display information for a quality level from the central map."""
    try:
        return QUALITY_MAP[Quality(quality)]
    except ValueError:
        return {"name": "Unknown", "short": str(quality), "color": "white"}


class CipherSettings(BaseModel):
    """
    Immutable key material and path rules used by the path decryptor.

    Kept separate from the full configuration so the decryptor can be built
    with alternate fixtures in tests.
    """

    model_config = ConfigDict(frozen=True)

    key: bytes
    iv: bytes
    hls_base_url: str = DEFAULT_HLS_BASE_URL
    path_marker: str = "hls/"

    @field_validator("key", "iv")
    @classmethod
    def validate_block_size(cls, v: bytes) -> bytes:
        """AES-128 needs exactly 16 bytes for both key and IV."""
        if len(v) != 16:
            raise ValueError(f"Must be exactly 16 bytes, got {len(v)}.")
        return v

    @field_validator("path_marker")
    @classmethod
    def validate_marker(cls, v: str) -> str:
        if not v:
            raise ValueError("Path marker cannot be empty.")
        return v


class StreamConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Decryption
    aes_key: str = DEFAULT_AES_KEY
    aes_iv: str = DEFAULT_AES_IV
    hls_base_url: str = DEFAULT_HLS_BASE_URL
    path_marker: str = "hls/"

    # Upstream API
    lookup_url: str = DEFAULT_LOOKUP_URL
    stream_format: str = "mp4"
    user_agent: str = DEFAULT_USER_AGENT
    quality: Quality = Quality.HIGH
    request_timeout: float = 30.0

    # Circuit breaker
    failure_threshold: int = 5
    recovery_timeout: int = 60

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("aes_key", "aes_iv")
    @classmethod
    def validate_cipher_material(cls, v: str) -> str:
        """Ensures the key and IV encode to a single AES block."""
        if len(v.encode("utf-8")) != 16:
            raise ValueError("AES key and IV must each encode to exactly 16 bytes.")
        return v

    @field_validator("hls_base_url", "lookup_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://, got: {v}")
        return v

    @field_validator("hls_base_url")
    @classmethod
    def validate_base_url_slash(cls, v: str) -> str:
        """The decrypted path is appended verbatim, so the base must end with '/'."""
        if not v.endswith("/"):
            raise ValueError("HLS base URL must end with '/'.")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v < 1 or v > 300:
            raise ValueError("Request timeout must be between 1 and 300 seconds.")
        return v

    @field_validator("failure_threshold", "recovery_timeout")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Circuit breaker settings must be positive.")
        return v

    def cipher_settings(self) -> CipherSettings:
        """Builds the immutable settings consumed by the path decryptor."""
        return CipherSettings(
            key=self.aes_key.encode("utf-8"),
            iv=self.aes_iv.encode("utf-8"),
            hls_base_url=self.hls_base_url,
            path_marker=self.path_marker,
        )

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
