"""
Storage module for the file manifest and analysis tables.
"""

import logging
import os
from typing import Any, Dict, List, Optional

import pandas as pd

from media_manager.config import Config


logger = logging.getLogger(__name__)


MANIFEST_COLUMNS = ["id", "directory", "file_name", "file_size", "mtime"]


class Storage:
    """Storage manager for the per-library Parquet tables."""

    def __init__(self, config: Optional[Config] = None, library_root: str = "."):
        """Initialize storage manager.

        Args:
            config: Configuration object.
            library_root: Canonical library root the tables belong to.
        """
        self.config = config or Config()
        self.library_root = library_root
        self.data_dir = self.config.data_dir(library_root)
        self.manifest_filename = self.config.get(
            "storage.manifest_filename", "files.parquet"
        )
        self.analysis_filename = self.config.get(
            "storage.analysis_filename", "analysis.parquet"
        )

    @property
    def manifest_path(self) -> str:
        """Get file manifest path."""
        return os.path.join(self.data_dir, self.manifest_filename)

    @property
    def analysis_path(self) -> str:
        """Get analysis table path."""
        return os.path.join(self.data_dir, self.analysis_filename)

    def _save_table(self, df: pd.DataFrame, path: str) -> str:
        """Save a table to Parquet (or CSV as fallback).

        Args:
            df: Table to save.
            path: Target Parquet path.

        Returns:
            Path to saved file.
        """
        os.makedirs(os.path.dirname(path), exist_ok=True)

        csv_path = _csv_path(path)

        try:
            df.to_parquet(path, index=False)
            logger.info(f"Table saved to: {path}")
            return path
        except (ImportError, ValueError) as e:
            logger.warning(f"Could not save as Parquet, falling back to CSV: {e}")
            df.to_csv(csv_path, index=False)
            logger.info(f"Table saved to: {csv_path}")
            return csv_path

    def _load_table(
        self,
        path: str,
        dtype: Optional[Dict[str, Any]] = None
    ) -> pd.DataFrame:
        """Load a table from Parquet (or CSV as fallback).

        Args:
            path: Parquet path of the table.
            dtype: Column types applied when reading CSV.

        Returns:
            DataFrame, empty if the table does not exist.
        """
        if not os.path.exists(path):
            csv_path = _csv_path(path)
            if os.path.exists(csv_path):
                logger.debug(f"Loading CSV table: {csv_path}")
                return pd.read_csv(csv_path, dtype=dtype, keep_default_na=False)

            logger.warning(f"Table not found: {path}")
            return pd.DataFrame()

        df = pd.read_parquet(path)
        logger.debug(f"Table loaded: {len(df)} rows from {path}")
        return df

    def save_manifest(self, records: List[Dict[str, Any]]) -> str:
        """Save the file manifest.

        Args:
            records: List of file record dictionaries.

        Returns:
            Path to saved file.
        """
        df = pd.DataFrame(records, columns=MANIFEST_COLUMNS)
        df["id"] = df["id"].astype("int64")
        df["directory"] = df["directory"].astype(str)
        return self._save_table(df, self.manifest_path)

    def load_manifest(self) -> pd.DataFrame:
        """Load the file manifest.

        Returns:
            DataFrame with one row per library file.
        """
        df = self._load_table(
            self.manifest_path, dtype={"directory": str, "file_name": str}
        )

        if df.empty:
            return pd.DataFrame(columns=MANIFEST_COLUMNS)

        # Root-level files have an empty directory, which must not come back as NaN
        df["directory"] = df["directory"].fillna("").astype(str)
        df["file_name"] = df["file_name"].astype(str)
        df["id"] = df["id"].astype("int64")
        return df

    def save_analysis(self, rows: List[Dict[str, Any]]) -> str:
        """Save the analysis table.

        Args:
            rows: One dictionary per item: ``id`` plus numeric feature values.

        Returns:
            Path to saved file.
        """
        df = pd.DataFrame(rows)
        if "id" not in df.columns:
            raise ValueError("Analysis rows must have an 'id' column")
        df["id"] = df["id"].astype("int64")
        return self._save_table(df, self.analysis_path)

    def load_analysis(self) -> pd.DataFrame:
        """Load the analysis table.

        Returns:
            DataFrame with an ``id`` column and feature columns.
        """
        return self._load_table(self.analysis_path)

    def exists(self) -> bool:
        """Check if the manifest exists.

        Returns:
            True if a Parquet or CSV manifest file exists.
        """
        return os.path.exists(self.manifest_path) or os.path.exists(
            _csv_path(self.manifest_path)
        )


def _csv_path(path: str) -> str:
    return path[: -len(".parquet")] + ".csv" if path.endswith(".parquet") else path + ".csv"
