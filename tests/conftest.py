"""Shared fixtures for stream resolution tests."""

import base64

import pytest
from Crypto.Cipher import AES

from gaana_stream.exceptions import FetchFailureError
from gaana_stream.models.config import CipherSettings, StreamConfig
from gaana_stream.stream.decryptor import PathDecryptor

HLS_BASE = "https://vodhlsgaana-ebw.akamaized.net/"


def make_token(plaintext: bytes, settings: CipherSettings, offset: int = 3) -> str:
    """Builds a token the way the stream-url endpoint does."""
    padded = plaintext + b"\0" * (-len(plaintext) % AES.block_size)
    cipher = AES.new(settings.key, AES.MODE_CBC, iv=settings.iv)
    payload = base64.b64encode(cipher.encrypt(padded)).decode("ascii").rstrip("=")
    return str(offset) + "Z" * (offset + 15) + payload


class FakeFetcher:
    """Serves playlist text from a dict and records every requested URL."""

    def __init__(self, pages: dict[str, str]):
        self.pages = pages
        self.calls: list[str] = []

    async def __call__(self, url: str) -> str:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchFailureError("Failed to fetch playlist: 404", url=url, status=404)
        return self.pages[url]


@pytest.fixture
def stream_config():
    return StreamConfig()


@pytest.fixture
def cipher_settings(stream_config):
    return stream_config.cipher_settings()


@pytest.fixture
def decryptor(cipher_settings):
    return PathDecryptor(cipher_settings)


@pytest.fixture
def token_factory(cipher_settings):
    def _factory(path: str | bytes, offset: int = 3) -> str:
        raw = path.encode("utf-8") if isinstance(path, str) else path
        return make_token(raw, cipher_settings, offset)

    return _factory


@pytest.fixture
def master_url():
    return HLS_BASE + "hls/a/b/123456/master.m3u8?token=abc"


@pytest.fixture
def hls_pages(master_url):
    """A master playlist pointing at a fragmented-MP4 media playlist."""
    master = "\n".join(
        [
            "#EXTM3U",
            "#EXT-X-STREAM-INF:BANDWIDTH=320000,CODECS=\"mp4a.40.2\"",
            "stream.m3u8?token=abc",
        ]
    )
    media = "\n".join(
        [
            "#EXTM3U",
            "#EXT-X-VERSION:7",
            "#EXT-X-TARGETDURATION:4",
            '#EXT-X-MAP:URI="init.mp4"',
            "#EXTINF:4.000,",
            "seg-1.m4s",
            "#EXTINF:4.000,",
            "seg-2.m4s",
            "#EXTINF:2.000,",
            "seg-3.m4s",
            "#EXT-X-ENDLIST",
        ]
    )
    return {
        master_url: master,
        HLS_BASE + "hls/a/b/123456/stream.m3u8?token=abc": media,
    }
