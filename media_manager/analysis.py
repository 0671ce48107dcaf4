"""
Analysis module: audio feature extraction with librosa and the
analysis table the recommender is built from.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from media_manager.config import Config
from media_manager.library import FileRecord
from media_manager.storage import Storage


logger = logging.getLogger(__name__)


class FeatureExtractor:
    """Extractor for audio features using librosa."""

    def __init__(self, config: Optional[Config] = None):
        """Initialize feature extractor.

        Args:
            config: Configuration object.
        """
        self.config = config or Config()

        self.sample_rate = self.config.get("analysis.sample_rate", 22050)
        self.duration_limit = self.config.get("analysis.duration_limit", None)
        self.n_mfcc = self.config.get("analysis.n_mfcc", 20)

        self._librosa = None
        self._init_librosa()

    def _init_librosa(self) -> None:
        """Initialize librosa."""
        try:
            import librosa
            self._librosa = librosa
        except ImportError:
            logger.error("Librosa not available. Feature extraction will fail.")

    def load_audio(self, file_path: str) -> Tuple[np.ndarray, int]:
        """Load audio file as mono at the configured sample rate.

        Args:
            file_path: Path to audio file.

        Returns:
            Tuple of (audio data, sample rate).
        """
        if self._librosa is None:
            raise RuntimeError("Librosa not available")

        return self._librosa.load(
            file_path,
            sr=self.sample_rate,
            mono=True,
            duration=self.duration_limit
        )

    def extract_features(self, file_path: str) -> Dict[str, float]:
        """Extract a flat dictionary of summary features.

        Args:
            file_path: Path to audio file.

        Returns:
            Feature name to value.
        """
        librosa = self._librosa
        y, sr = self.load_audio(file_path)

        if len(y) == 0:
            raise ValueError(f"No audio samples in {file_path}")

        features: Dict[str, float] = {}

        mfccs = librosa.feature.mfcc(y=y, sr=sr, n_mfcc=self.n_mfcc)
        _add_vector(features, "mfcc_mean", mfccs.mean(axis=1))
        _add_vector(features, "mfcc_std", mfccs.std(axis=1))

        chroma = librosa.feature.chroma_stft(y=y, sr=sr)
        _add_vector(features, "chroma_mean", chroma.mean(axis=1))

        for name, values in [
            ("spectral_centroid", librosa.feature.spectral_centroid(y=y, sr=sr)),
            ("spectral_bandwidth", librosa.feature.spectral_bandwidth(y=y, sr=sr)),
            ("spectral_rolloff", librosa.feature.spectral_rolloff(y=y, sr=sr)),
            ("rms", librosa.feature.rms(y=y)),
            ("zcr", librosa.feature.zero_crossing_rate(y)),
        ]:
            features[f"{name}_mean"] = float(values.mean())
            features[f"{name}_std"] = float(values.std())

        tempo, _ = librosa.beat.beat_track(y=y, sr=sr)
        features["tempo"] = float(np.atleast_1d(tempo)[0])

        return features


def _add_vector(features: Dict[str, float], prefix: str, values: np.ndarray) -> None:
    for i, value in enumerate(values):
        features[f"{prefix}_{i}"] = float(value)


class Analyzer:
    """Builds the analysis table for the files in the manifest."""

    def __init__(
        self,
        config: Optional[Config] = None,
        library_root: str = ".",
        storage: Optional[Storage] = None,
        extractor: Optional[FeatureExtractor] = None
    ):
        """Initialize analyzer.

        Args:
            config: Configuration object.
            library_root: Canonical library root directory.
            storage: Storage manager. Created from config if None.
            extractor: Feature extractor. Created from config if None.
        """
        self.config = config or Config()
        self.library_root = library_root
        self.storage = storage or Storage(self.config, library_root)
        self.extractor = extractor or FeatureExtractor(self.config)

    def analyze(self, skip_existing: bool = True) -> Dict[str, Any]:
        """Extract features for every manifest file and save the analysis table.

        Rows of files no longer in the manifest are dropped. A file that
        fails to decode is logged and left out of the table.

        Args:
            skip_existing: Keep rows already in the analysis table
                instead of recomputing them.

        Returns:
            Counts of analyzed, skipped and failed files.
        """
        manifest = self.storage.load_manifest()
        summary = {"analyzed": 0, "skipped": 0, "failed": 0}

        if manifest.empty:
            logger.warning("Manifest is empty; scan the library first")
            return summary

        existing: Dict[int, Dict[str, Any]] = {}
        if skip_existing:
            analysis = self.storage.load_analysis()
            if not analysis.empty and "id" in analysis.columns:
                existing = {
                    int(row["id"]): row for row in analysis.to_dict("records")
                }

        rows: List[Dict[str, Any]] = []
        records = [
            FileRecord(int(row.id), row.directory, row.file_name)
            for row in manifest.itertuples(index=False)
        ]

        for record in tqdm(records, desc="Analyzing", unit="file"):
            if record.id in existing:
                rows.append(existing[record.id])
                summary["skipped"] += 1
                continue

            file_path = record.absolute_path(self.library_root)
            try:
                features = self.extractor.extract_features(str(file_path))
            except Exception as e:
                logger.error(f"Error analyzing {file_path}: {e}")
                summary["failed"] += 1
                continue

            rows.append({"id": record.id, **features})
            summary["analyzed"] += 1

        if rows:
            self.storage.save_analysis(rows)
        else:
            logger.warning("No files could be analyzed")

        logger.info(
            f"Analysis complete: {summary['analyzed']} analyzed, "
            f"{summary['skipped']} skipped, {summary['failed']} failed"
        )
        return summary
