"""
Media Manager - recommendation export for local media libraries.

This package provides tools for:
- Scanning a media library into a file manifest
- Extracting audio features into the analysis table
- Looking up items by id or file path
- Retrieving similar items from the recommendation index
- Exporting recommendations as a table, JSON file or M3U8 playlist
"""

__version__ = "0.1.0"
__license__ = "MIT"

from media_manager.config import Config
from media_manager.library import FileRecord, Library
from media_manager.storage import Storage
from media_manager.analysis import Analyzer, FeatureExtractor
from media_manager.recommender import RecommendationEntry, Recommender
from media_manager.render import OutputFormat, RenderResult, RenderTarget, render
from media_manager.pipeline import ItemIdentifier, RecommendationPipeline

__all__ = [
    "Config",
    "FileRecord",
    "Library",
    "Storage",
    "Analyzer",
    "FeatureExtractor",
    "RecommendationEntry",
    "Recommender",
    "OutputFormat",
    "RenderResult",
    "RenderTarget",
    "render",
    "ItemIdentifier",
    "RecommendationPipeline",
]
