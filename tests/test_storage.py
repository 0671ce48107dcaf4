"""
Tests for the storage module.
"""

import os

import pandas as pd
import pytest

from media_manager.config import Config
from media_manager.storage import Storage


class TestStorage:
    """Tests for Storage class."""

    @pytest.fixture
    def empty_storage(self, library_root):
        """Create storage instance with no tables."""
        return Storage(Config(), library_root)

    @pytest.fixture
    def sample_files(self):
        """Sample manifest records."""
        return [
            {"id": 1, "directory": "", "file_name": "root.mp3", "file_size": 10, "mtime": 1.0},
            {"id": 2, "directory": "Artist", "file_name": "01.flac", "file_size": 20, "mtime": 2.0},
        ]

    def test_data_dir_under_library_root(self, empty_storage, library_root):
        """Test store directory defaults to a folder in the library."""
        assert empty_storage.data_dir == os.path.join(library_root, ".media_manager")
        assert empty_storage.manifest_path.startswith(empty_storage.data_dir)

    def test_absolute_data_dir(self, library_root, tmp_path):
        """Test absolute store directories are used as-is."""
        config = Config()
        config.set("storage.data_dir", str(tmp_path))

        storage = Storage(config, library_root)

        assert storage.data_dir == str(tmp_path)

    def test_save_and_load_manifest(self, empty_storage, sample_files):
        """Test manifest round trip keeps types and empty directories."""
        path = empty_storage.save_manifest(sample_files)

        assert os.path.exists(path)
        assert empty_storage.exists()

        df = empty_storage.load_manifest()

        assert len(df) == 2
        assert list(df["id"]) == [1, 2]
        assert df.iloc[0]["directory"] == ""
        assert df.iloc[1]["file_name"] == "01.flac"

    def test_load_nonexistent_manifest(self, empty_storage):
        """Test loading a missing manifest gives an empty table."""
        df = empty_storage.load_manifest()

        assert df.empty
        assert "id" in df.columns
        assert not empty_storage.exists()

    def test_save_empty_manifest(self, empty_storage):
        """Test saving an empty manifest."""
        empty_storage.save_manifest([])

        assert empty_storage.load_manifest().empty

    def test_save_and_load_analysis(self, empty_storage):
        """Test analysis round trip."""
        empty_storage.save_analysis([
            {"id": 1, "f0": 0.5, "f1": 1.5},
            {"id": 2, "f0": 0.25, "f1": 2.5},
        ])

        df = empty_storage.load_analysis()

        assert list(df["id"]) == [1, 2]
        assert df["f1"].tolist() == [1.5, 2.5]

    def test_analysis_requires_id(self, empty_storage):
        """Test analysis rows without ids are rejected."""
        with pytest.raises(ValueError):
            empty_storage.save_analysis([{"f0": 1.0}])

    def test_load_missing_analysis(self, empty_storage):
        """Test loading a missing analysis table."""
        assert isinstance(empty_storage.load_analysis(), pd.DataFrame)
        assert empty_storage.load_analysis().empty
