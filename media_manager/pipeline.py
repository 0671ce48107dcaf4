"""
Pipeline module that runs the recommendation export workflow:
resolve the item, retrieve neighbours, join file records, render.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rich.console import Console

from media_manager.config import Config
from media_manager.errors import UsageError
from media_manager.library import Library
from media_manager.recommender import RecommendationEntry, Recommender
from media_manager.render import RenderResult, RenderTarget, ResolvedEntry, render
from media_manager.storage import Storage


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ItemIdentifier:
    """Either a direct item id or a file path inside the library."""

    item_id: Optional[int] = None
    file_path: Optional[str] = None

    @classmethod
    def from_options(
        cls,
        item_id: Optional[int],
        file_path: Optional[str]
    ) -> "ItemIdentifier":
        """Build an identifier, requiring exactly one of the two selectors.

        Raises:
            UsageError: If neither or both selectors are given.
        """
        if item_id is None and file_path is None:
            raise UsageError("Either item_id or file_path must be provided.")
        if item_id is not None and file_path is not None:
            raise UsageError("Only one of item_id or file_path may be provided.")
        return cls(item_id=item_id, file_path=file_path)


def resolve_identifier(
    identifier: ItemIdentifier,
    library_root: str,
    library: Library
) -> int:
    """Turn an identifier into an item id.

    Direct ids are returned unchanged; file paths are looked up in the
    library's file store.
    """
    if identifier.item_id is not None:
        return identifier.item_id

    item_id = library.lookup_id_by_path(library_root, identifier.file_path)
    logger.debug(f"Resolved {identifier.file_path} to item {item_id}")
    return item_id


def retrieve_recommendations(
    item_id: int,
    count: int,
    recommender: Recommender
) -> List[RecommendationEntry]:
    """Get up to ``count`` neighbours of an item, most similar first."""
    if count < 1:
        raise UsageError("Number of recommendations must be at least 1")

    return recommender.nearest_neighbors(item_id, count)


def join_file_records(
    entries: Sequence[RecommendationEntry],
    library: Library
) -> List[ResolvedEntry]:
    """Pair each entry with its file record, keeping retrieval order.

    Entries without a record are paired with None.
    """
    records = library.lookup_records_by_ids({entry.item_id for entry in entries})

    resolved = []
    for entry in entries:
        record = records.get(entry.item_id)
        if record is None:
            logger.debug(f"No file record for recommended item {entry.item_id}")
        resolved.append((entry, record))

    return resolved


class RecommendationPipeline:
    """Runs the recommendation export workflow for one library."""

    def __init__(
        self,
        library_root: str,
        config: Optional[Config] = None,
        library: Optional[Library] = None,
        recommender: Optional[Recommender] = None
    ):
        """Initialize pipeline.

        Args:
            library_root: Canonical library root directory.
            config: Configuration object.
            library: File-metadata store. Created from config if None.
            recommender: Recommendation backend. Created and loaded lazily
                from config if None.
        """
        self.library_root = library_root
        self.config = config or Config()
        self.storage = Storage(self.config, library_root)
        self.library = library or Library(self.config, library_root, self.storage)
        self._recommender = recommender

    @property
    def recommender(self) -> Recommender:
        """Get the recommendation backend, loading it on first use."""
        if self._recommender is None:
            self._recommender = Recommender(self.config, self.storage)
            self._recommender.load()
        return self._recommender

    def run(
        self,
        identifier: ItemIdentifier,
        target: RenderTarget,
        num: Optional[int] = None,
        console: Optional[Console] = None
    ) -> RenderResult:
        """Run resolve, retrieve, join and render in sequence.

        Args:
            identifier: Item to recommend for.
            target: Output format and path.
            num: Maximum number of recommendations.
            console: Console used for table output.

        Returns:
            Render result.
        """
        num = num if num is not None else self.config.default_num

        item_id = resolve_identifier(identifier, self.library_root, self.library)
        entries = retrieve_recommendations(item_id, num, self.recommender)
        logger.info(f"Retrieved {len(entries)} recommendations for item {item_id}")

        resolved = join_file_records(entries, self.library)
        return render(resolved, target, self.library_root, console)
