"""Tests for HLS playlist parsing and the master → media walk."""

import pytest

from gaana_stream.exceptions import (
    EmptyManifestError,
    FetchFailureError,
    ManifestError,
    NoSegmentsFoundError,
)
from gaana_stream.models.stream import Manifest, Segment
from gaana_stream.stream.manifest import (
    ManifestResolver,
    find_nested_playlist,
    parse_duration_ms,
    parse_media_playlist,
    split_lines,
)

from .conftest import HLS_BASE, FakeFetcher

PLAYLIST_URL = "https://cdn.example/hls/t/stream.m3u8?token=1"


def lines(text: str) -> list[str]:
    return split_lines(text)


class TestParseMediaPlaylist:
    def test_duration_applies_to_next_segment_only(self):
        manifest = parse_media_playlist(
            PLAYLIST_URL, lines("#EXTINF:4.5,\nseg1.ts\nseg2.ts")
        )
        assert [s.duration_ms for s in manifest.segments] == [4500, 6000]

    def test_segments_resolved_in_order(self):
        manifest = parse_media_playlist(
            PLAYLIST_URL,
            lines("#EXTINF:1,\nb.ts\n#EXTINF:2,\na.ts\n#EXTINF:3,\n/abs/c.ts"),
        )
        assert [s.url for s in manifest.segments] == [
            "https://cdn.example/hls/t/b.ts",
            "https://cdn.example/hls/t/a.ts",
            "https://cdn.example/abs/c.ts",
        ]
        assert manifest.total_duration_ms == 6000

    def test_init_segment_last_one_wins(self):
        text = '#EXT-X-MAP:URI="first.mp4"\n#EXT-X-MAP:URI="second.mp4"\nseg.m4s'
        manifest = parse_media_playlist(PLAYLIST_URL, lines(text))
        assert manifest.init_segment_url == "https://cdn.example/hls/t/second.mp4"

    def test_map_with_byte_range_attribute(self):
        text = '#EXT-X-MAP:URI="init.mp4",BYTERANGE="720@0"\nseg.m4s'
        manifest = parse_media_playlist(PLAYLIST_URL, lines(text))
        assert manifest.init_segment_url == "https://cdn.example/hls/t/init.mp4"

    def test_no_init_segment(self):
        manifest = parse_media_playlist(PLAYLIST_URL, lines("seg.ts"))
        assert manifest.init_segment_url is None

    @pytest.mark.parametrize(
        "name", ["a.ts", "a.m4s", "a.mp4", "a.m4a", "a.aac", "A.TS", "a.aac?x=1"]
    )
    def test_segment_extensions(self, name):
        manifest = parse_media_playlist(PLAYLIST_URL, [name])
        assert len(manifest.segments) == 1

    def test_unknown_lines_are_ignored(self):
        text = "\n".join(
            [
                "#EXTM3U",
                "#EXT-X-SOMETHING-NEW:VALUE=1",
                "#EXTINF:3,",
                "readme.txt",
                "seg.ts",
                "# a plain comment",
            ]
        )
        manifest = parse_media_playlist(PLAYLIST_URL, lines(text))
        # The non-media line consumed the pending duration
        assert manifest.segments == (
            Segment(url="https://cdn.example/hls/t/seg.ts", duration_ms=6000),
        )

    def test_only_directives_fail(self):
        text = "#EXTM3U\n#EXT-X-VERSION:3\n#EXT-X-ENDLIST"
        with pytest.raises(NoSegmentsFoundError):
            parse_media_playlist(PLAYLIST_URL, lines(text))

    def test_parsing_twice_gives_equal_manifests(self, hls_pages):
        media_url = HLS_BASE + "hls/a/b/123456/stream.m3u8?token=abc"
        page = lines(hls_pages[media_url])
        assert parse_media_playlist(media_url, page) == parse_media_playlist(
            media_url, page
        )


class TestParseDuration:
    @pytest.mark.parametrize(
        "directive, expected",
        [
            ("#EXTINF:4.000,", 4000),
            ("#EXTINF:10,title", 10000),
            ("#EXTINF:3.0006,", 3001),
            ("#EXTINF:2.9994,", 2999),
            ("#EXTINF:4.2abc,", 4200),
            ("#EXTINF: 5.5,", 5500),
            ("#EXTINF:1e1,", 10000),
            ("#EXTINF:", 6000),
            ("#EXTINF:abc,", 6000),
            ("#EXTINF:0,", 6000),
            ("#EXTINF:-2,", 6000),
            ("#EXTINF:1e400,", 6000),
        ],
    )
    def test_parse(self, directive, expected):
        assert parse_duration_ms(directive) == expected


def test_find_nested_playlist_skips_comments():
    text = "#EXTM3U\n#EXT-X-I-FRAME-STREAM-INF:URI=\"iframe.m3u8\"\nlow/index.m3u8"
    assert find_nested_playlist(PLAYLIST_URL, lines(text)) == (
        "https://cdn.example/hls/t/low/index.m3u8"
    )


def test_find_nested_playlist_none_for_media_playlist():
    assert find_nested_playlist(PLAYLIST_URL, lines("#EXTINF:4,\nseg.ts")) is None


def test_split_lines_blank_text():
    assert split_lines("  \n\n \r\n") == []
    assert split_lines("a\r\n b ") == ["a", "b"]


class TestManifestResolver:
    @pytest.mark.asyncio
    async def test_master_to_media(self, master_url, hls_pages):
        fetcher = FakeFetcher(hls_pages)
        manifest = await ManifestResolver(fetcher).resolve(master_url)

        assert len(manifest.segments) == 3
        assert manifest.total_duration_ms == 10000
        assert manifest.init_segment_url == HLS_BASE + "hls/a/b/123456/init.mp4"
        assert manifest.segments[0].url == HLS_BASE + "hls/a/b/123456/seg-1.m4s"
        assert fetcher.calls == [
            master_url,
            HLS_BASE + "hls/a/b/123456/stream.m3u8?token=abc",
        ]

    @pytest.mark.asyncio
    async def test_flat_playlist(self):
        url = "https://cdn.example/hls/t/index.m3u8"
        fetcher = FakeFetcher({url: "#EXTM3U\n#EXTINF:5,\npart0.ts\n#EXTINF:5,\npart1.ts"})

        manifest = await ManifestResolver(fetcher).resolve(url)

        assert isinstance(manifest, Manifest)
        assert manifest.total_duration_ms == 10000
        assert fetcher.calls == [url]

    @pytest.mark.asyncio
    async def test_media_playlist_is_not_followed_further(self):
        master = "https://cdn.example/master.m3u8"
        media = "https://cdn.example/media.m3u8"
        fetcher = FakeFetcher(
            {master: "media.m3u8", media: "deeper.m3u8\n#EXTINF:2,\nseg.ts"}
        )

        manifest = await ManifestResolver(fetcher).resolve(master)

        assert fetcher.calls == [master, media]
        assert manifest.segments[0].duration_ms == 2000

    @pytest.mark.asyncio
    async def test_empty_master(self):
        url = "https://cdn.example/master.m3u8"
        with pytest.raises(EmptyManifestError):
            await ManifestResolver(FakeFetcher({url: ""})).resolve(url)

    @pytest.mark.asyncio
    async def test_empty_media_playlist(self):
        master = "https://cdn.example/master.m3u8"
        fetcher = FakeFetcher({master: "media.m3u8", "https://cdn.example/media.m3u8": "\n"})
        with pytest.raises(EmptyManifestError):
            await ManifestResolver(fetcher).resolve(master)

    @pytest.mark.asyncio
    async def test_fetch_failure_propagates(self):
        master = "https://cdn.example/master.m3u8"
        fetcher = FakeFetcher({master: "missing.m3u8"})
        with pytest.raises(FetchFailureError) as exc_info:
            await ManifestResolver(fetcher).resolve(master)
        assert exc_info.value.status == 404
        assert exc_info.value.stage == "manifest"

    @pytest.mark.asyncio
    async def test_zero_segments(self):
        url = "https://cdn.example/master.m3u8"
        fetcher = FakeFetcher({url: "#EXTM3U\n#EXT-X-ENDLIST"})
        with pytest.raises(ManifestError):
            await ManifestResolver(fetcher).resolve(url)
