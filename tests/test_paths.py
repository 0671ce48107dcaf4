"""
Tests for the path helpers.
"""

import os
from pathlib import Path

import pytest

from media_manager.errors import PathError
from media_manager.paths import normalize_extension, relativize


class TestNormalizeExtension:
    """Tests for normalize_extension."""

    def test_adds_missing_extension(self):
        assert normalize_extension("out", "json") == Path("out.json")

    def test_replaces_wrong_extension(self):
        assert normalize_extension("playlists/mix.txt", "m3u8") == Path("playlists/mix.m3u8")

    def test_keeps_matching_extension(self):
        path = Path("/tmp/recs.json")
        assert normalize_extension(path, "json") == path

    def test_accepts_leading_dot(self):
        assert normalize_extension("out", ".json") == Path("out.json")

    def test_comparison_is_case_sensitive(self):
        assert normalize_extension("mix.M3U8", "m3u8") == Path("mix.m3u8")

    def test_only_last_suffix_replaced(self):
        assert normalize_extension("archive.tar.gz", "json") == Path("archive.tar.json")

    @pytest.mark.parametrize("path", ["out", "out.json", "a/b.txt", "x.JSON", ".hidden"])
    def test_idempotent(self, path):
        once = normalize_extension(path, "json")
        assert normalize_extension(once, "json") == once
        assert once.suffix == ".json"


class TestRelativize:
    """Tests for relativize."""

    def test_descendant(self):
        assert relativize("/music/a/b.flac", "/music") == Path("a/b.flac")

    def test_sibling_directory(self):
        assert relativize("/music/a/b.flac", "/music/playlists") == Path("../a/b.flac")

    def test_output_outside_library(self):
        result = relativize("/music/a/b.flac", "/home/user/lists")
        assert result == Path("../../../music/a/b.flac")

    def test_output_below_target_directory(self):
        assert relativize("/music/b.flac", "/music/x/y/z") == Path("../../../b.flac")

    @pytest.mark.parametrize("target, base", [
        ("/music/a/b.flac", "/music"),
        ("/music/a/b.flac", "/music/playlists/deep"),
        ("/music/b.flac", "/other/place"),
        ("/music/a/b.flac", "/music/a"),
    ])
    def test_round_trip(self, target, base):
        relative = relativize(target, base)
        assert os.path.normpath(os.path.join(base, relative)) == os.path.normpath(target)

    def test_mixed_absolute_and_relative(self):
        with pytest.raises(PathError):
            relativize("music/a.flac", "/playlists")
