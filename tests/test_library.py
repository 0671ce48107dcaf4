"""
Tests for the library module.
"""

import os
from pathlib import Path

import pytest

from media_manager.config import Config
from media_manager.errors import NotFoundError
from media_manager.library import FileRecord, Library


def touch(root, relative):
    path = os.path.join(root, relative)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
        f.write(b'test content')
    return path


class TestScan:
    """Tests for scanning a library."""

    @pytest.fixture
    def music_dir(self, library_root):
        """Create library with audio and non-audio files."""
        for relative in [
            "root.mp3",
            "Artist/Album/01.flac",
            "Artist/Album/02.FLAC",
            "Artist/cover.jpg",
            "Other/track.wav",
            "notes.txt",
        ]:
            touch(library_root, relative)
        return library_root

    def test_find_audio_files(self, music_dir):
        library = Library(Config(), music_dir)

        files = list(library.find_audio_files())
        names = sorted(f.name for f in files)

        assert names == ["01.flac", "02.FLAC", "root.mp3", "track.wav"]

    def test_scan_records(self, music_dir):
        library = Library(Config(), music_dir)

        records = library.scan()

        assert len(records) == 4
        assert sorted(r["id"] for r in records) == [1, 2, 3, 4]
        by_name = {r["file_name"]: r for r in records}
        assert by_name["root.mp3"]["directory"] == ""
        assert by_name["01.flac"]["directory"] == "Artist/Album"
        assert library.storage.exists()

    def test_scan_skips_store_directory(self, music_dir):
        library = Library(Config(), music_dir)
        touch(library.storage.data_dir, "stray.mp3")

        records = library.scan()

        assert "stray.mp3" not in {r["file_name"] for r in records}

    def test_rescan_keeps_ids(self, music_dir):
        library = Library(Config(), music_dir)
        first = {r["file_name"]: r["id"] for r in library.scan()}

        os.remove(os.path.join(music_dir, "root.mp3"))
        touch(music_dir, "Artist/Album/03.flac")
        second = {r["file_name"]: r["id"] for r in library.scan()}

        assert "root.mp3" not in second
        assert second["01.flac"] == first["01.flac"]
        assert second["track.wav"] == first["track.wav"]
        assert second["03.flac"] == max(first.values()) + 1

    def test_scan_nonexistent_dir(self, tmp_path):
        library = Library(Config(), str(tmp_path / "missing"))

        assert list(library.find_audio_files()) == []


class TestLookups:
    """Tests for file-metadata lookups."""

    @pytest.fixture
    def library(self, config, library_root, storage):
        return Library(config, library_root, storage)

    def test_lookup_id_by_absolute_path(self, library, library_root):
        path = os.path.join(library_root, "Other", "b.mp3")

        assert library.lookup_id_by_path(library_root, path) == 13

    def test_lookup_root_level_file(self, library, library_root):
        path = os.path.join(library_root, "c.wav")

        assert library.lookup_id_by_path(library_root, path) == 99

    def test_lookup_relative_to_cwd(self, library, library_root, monkeypatch):
        monkeypatch.chdir(os.path.join(library_root))

        assert library.lookup_id_by_path(library_root, "Artist/Album/a.flac") == 7

    def test_lookup_unknown_path(self, library, library_root):
        with pytest.raises(NotFoundError):
            library.lookup_id_by_path(library_root, os.path.join(library_root, "nope.mp3"))

    def test_lookup_outside_library(self, library, library_root, tmp_path):
        with pytest.raises(NotFoundError):
            library.lookup_id_by_path(library_root, str(tmp_path / "c.wav"))

    def test_lookup_records_by_ids(self, library):
        records = library.lookup_records_by_ids({7, 99, 77})

        assert set(records) == {7, 99}
        assert records[7] == FileRecord(7, "Artist/Album", "a.flac")
        assert records[99].directory == ""

    def test_lookup_no_ids(self, library):
        assert library.lookup_records_by_ids(set()) == {}

    def test_absolute_path(self):
        record = FileRecord(1, "A/B", "c.flac")

        assert record.absolute_path("/music") == Path("/music/A/B/c.flac")
        assert FileRecord(2, "", "d.mp3").absolute_path("/music") == Path("/music/d.mp3")
