"""
Shared fixtures: a small library with a manifest and an analysis table.
"""

import os
import tempfile

import pytest

from media_manager.config import Config
from media_manager.storage import Storage


# Items and their single feature value. With the manhattan metric and no
# normalization, distances from item 42 are exact binary fractions.
FEATURES = {
    42: 0.0,
    7: 0.125,
    13: 0.25,
    99: 0.5,
    77: 0.75,
    5: 1.0,
}

# Item 77 has analysis data but no file record.
FILES = [
    {"id": 42, "directory": "Artist/Album", "file_name": "seed.flac"},
    {"id": 7, "directory": "Artist/Album", "file_name": "a.flac"},
    {"id": 13, "directory": "Other", "file_name": "b.mp3"},
    {"id": 99, "directory": "", "file_name": "c.wav"},
    {"id": 5, "directory": "Deep/Nested/Dir", "file_name": "d.ogg"},
]


@pytest.fixture
def library_root():
    """Create temporary library root."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield os.path.realpath(tmpdir)


@pytest.fixture
def config():
    """Configuration with deterministic distances."""
    config = Config()
    config.set("recommender.metric", "manhattan")
    config.set("recommender.normalization", "none")
    return config


@pytest.fixture
def storage(config, library_root):
    """Storage populated with the sample manifest and analysis table."""
    storage = Storage(config, library_root)
    storage.save_manifest([
        dict(record, file_size=1024, mtime=0.0) for record in FILES
    ])
    storage.save_analysis([
        {"id": item_id, "feature_0": value} for item_id, value in FEATURES.items()
    ])
    return storage
