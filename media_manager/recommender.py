"""
Recommender module: nearest-neighbour lookups over the analysis table.
"""

import logging
from typing import List, NamedTuple, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.neighbors import NearestNeighbors

from media_manager.config import Config
from media_manager.errors import RetrievalError
from media_manager.storage import Storage


logger = logging.getLogger(__name__)


class RecommendationEntry(NamedTuple):
    """A recommended item and its distance to the query item."""

    item_id: int
    distance: float


def normalize_features(
    features: np.ndarray,
    method: str = "standard"
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Normalize feature array.

    Args:
        features: Feature array (n_samples, n_features).
        method: Normalization method (standard, minmax, none).

    Returns:
        Tuple of (normalized features, offset, scale).
    """
    if method == "none" or method is None:
        return features, np.zeros(features.shape[1]), np.ones(features.shape[1])

    if method == "standard":
        mean = features.mean(axis=0)
        std = features.std(axis=0)

        # Avoid division by zero
        std = np.where(std == 0, 1, std)

        return (features - mean) / std, mean, std

    elif method == "minmax":
        min_val = features.min(axis=0)
        range_val = features.max(axis=0) - min_val
        range_val = np.where(range_val == 0, 1, range_val)

        return (features - min_val) / range_val, min_val, range_val

    else:
        raise ValueError(f"Unknown normalization method: {method}")


class Recommender:
    """Content-based recommendation backend using scikit-learn."""

    def __init__(
        self,
        config: Optional[Config] = None,
        storage: Optional[Storage] = None
    ):
        """Initialize recommender.

        Args:
            config: Configuration object.
            storage: Storage manager holding the analysis table.
        """
        self.config = config or Config()
        self.storage = storage or Storage(self.config)

        self.metric = self.config.get("recommender.metric", "cosine")
        self.normalization = self.config.get("recommender.normalization", "standard")

        self._index: Optional[NearestNeighbors] = None
        self._item_ids: List[int] = []
        self._features: Optional[np.ndarray] = None

    def load(self) -> None:
        """Load the analysis table and fit the neighbour index."""
        df = self.storage.load_analysis()

        if df.empty or "id" not in df.columns:
            logger.warning("No analysis data available")
            return

        df = df.drop_duplicates(subset="id")
        feature_cols = [
            c for c in df.columns
            if c != "id" and pd.api.types.is_numeric_dtype(df[c])
        ]

        if not feature_cols:
            logger.warning("No feature columns found in analysis table")
            return

        features = df[feature_cols].fillna(0.0).values.astype(np.float32)
        features, _, _ = normalize_features(features, method=self.normalization)

        self._item_ids = [int(i) for i in df["id"].tolist()]
        self._features = features
        self._index = NearestNeighbors(metric=self.metric, algorithm="brute")
        self._index.fit(features)

        logger.info(
            f"Index built on {len(feature_cols)} features for {len(self._item_ids)} items"
        )

    def nearest_neighbors(self, item_id: int, count: int) -> List[RecommendationEntry]:
        """Find the items closest to a given item.

        Args:
            item_id: Item to find neighbours for.
            count: Maximum number of neighbours to return.

        Returns:
            Entries ordered by ascending distance, excluding the item itself.

        Raises:
            RetrievalError: If no index is loaded or the item is unknown.
        """
        if self._index is None:
            raise RetrievalError(
                "Recommendation index is not available; run 'analyze' first"
            )

        try:
            position = self._item_ids.index(item_id)
        except ValueError:
            raise RetrievalError(f"Item {item_id} is not in the recommendation index")

        n_neighbors = min(count + 1, len(self._item_ids))
        query = self._features[position].reshape(1, -1)
        distances, indices = self._index.kneighbors(query, n_neighbors=n_neighbors)

        results = []
        for dist, idx in zip(distances[0], indices[0]):
            candidate = self._item_ids[idx]
            if candidate == item_id:
                continue
            if len(results) >= count:
                break
            results.append(RecommendationEntry(candidate, float(dist)))

        return results

    @property
    def is_loaded(self) -> bool:
        """Check if the index is available."""
        return self._index is not None

    @property
    def item_count(self) -> int:
        """Get number of items in the index."""
        return len(self._item_ids)
