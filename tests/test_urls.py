"""Tests for playlist URL resolution."""

import pytest

from gaana_stream.stream.urls import base_path, origin, resolve_url

BASE = "https://host/a/b/playlist.m3u8?x=1"


def test_relative_reference():
    assert resolve_url(BASE, "seg0.ts") == "https://host/a/b/seg0.ts"


def test_root_relative_reference():
    assert resolve_url(BASE, "/media/seg0.ts") == "https://host/media/seg0.ts"


@pytest.mark.parametrize("ref", ["https://other/seg.ts", "http://other/x/seg.ts?k=v"])
def test_absolute_reference_unchanged(ref):
    assert resolve_url(BASE, ref) == ref


def test_relative_reference_keeps_its_query():
    assert resolve_url(BASE, "seg0.m4s?sig=1") == "https://host/a/b/seg0.m4s?sig=1"


def test_nested_relative_directory():
    assert resolve_url(BASE, "audio/seg0.ts") == "https://host/a/b/audio/seg0.ts"


def test_slash_in_query_is_ignored():
    url = "https://host/a/playlist.m3u8?path=/x/y"
    assert base_path(url) == "https://host/a/"


def test_base_path_of_directory_url():
    assert base_path("https://host/a/b/") == "https://host/a/b/"


def test_origin():
    assert origin(BASE) == "https://host"
    assert origin("https://host") == "https://host"
    assert origin("relative/path.m3u8") is None


def test_root_relative_against_bare_host():
    assert resolve_url("https://host", "/seg.ts") == "https://host/seg.ts"
