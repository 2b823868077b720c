"""
Recovers the HLS playlist URL hidden inside the `stream_path` token returned by
the stream-url endpoint.

Token layout: the first character is a decimal digit `n`; the first `n + 16`
characters of the token are skipped, and the rest is an unpadded Base64
AES-128-CBC ciphertext of the storage path.
"""

import base64
import binascii

from Crypto.Cipher import AES

from gaana_stream.exceptions import (
    CipherError,
    MalformedTokenError,
    PathMarkerNotFoundError,
)
from gaana_stream.models.config import CipherSettings

_FILLER_LENGTH = 16


class PathDecryptor:
    """Decrypts stream tokens with a fixed key and IV."""

    def __init__(self, settings: CipherSettings):
        self._settings = settings

    @property
    def settings(self) -> CipherSettings:
        return self._settings

    def decrypt(self, token: str) -> str:
        """
        Decrypts a stream token into a full HLS playlist URL.

        Raises:
            MalformedTokenError: Bad offset digit or undecodable Base64 payload.
            CipherError: Ciphertext is not block-aligned or fails to decrypt.
            PathMarkerNotFoundError: The plaintext has no storage-path marker.
        """
        ciphertext = self._extract_ciphertext(token)
        plaintext = self._decrypt_blocks(ciphertext)
        text = clean_plaintext(plaintext)

        marker = self._settings.path_marker
        start = text.find(marker)
        if start == -1:
            raise PathMarkerNotFoundError(
                f"No '{marker}' path found in decrypted text."
            )
        return self._settings.hls_base_url + text[start:]

    def _extract_ciphertext(self, token: str) -> bytes:
        if not token or not token[0].isdigit() or not token[0].isascii():
            raise MalformedTokenError(
                f"Invalid offset in encrypted data: {token[:1]!r}"
            )

        payload = token[int(token[0]) + _FILLER_LENGTH :]
        if not payload:
            raise MalformedTokenError("Token is too short to contain a payload.")

        try:
            ciphertext = base64.b64decode(payload + "==")
        except (binascii.Error, ValueError) as e:
            raise MalformedTokenError(f"Invalid Base64 payload: {e}") from e

        if not ciphertext:
            raise MalformedTokenError("Token payload decoded to zero bytes.")
        return ciphertext

    def _decrypt_blocks(self, ciphertext: bytes) -> bytes:
        if len(ciphertext) % AES.block_size:
            raise CipherError(
                f"Ciphertext length {len(ciphertext)} is not a multiple of "
                f"{AES.block_size}."
            )
        try:
            cipher = AES.new(self._settings.key, AES.MODE_CBC, iv=self._settings.iv)
            return cipher.decrypt(ciphertext)
        except ValueError as e:
            raise CipherError(f"AES-CBC decryption failed: {e}") from e


def clean_plaintext(plaintext: bytes) -> str:
    """Drops NUL bytes, surrounding whitespace and anything outside printable ASCII."""
    text = plaintext.decode("utf-8", errors="replace").replace("\0", "").strip()
    return "".join(c for c in text if 32 <= ord(c) <= 126)
