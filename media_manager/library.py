"""
Library module: file inventory and file-metadata lookups.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional

from media_manager.config import Config
from media_manager.errors import NotFoundError
from media_manager.storage import Storage


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileRecord:
    """Location of a library file relative to the library root."""

    id: int
    directory: str
    file_name: str

    def absolute_path(self, library_root: str) -> Path:
        """Get the file's path under the given library root."""
        return Path(library_root, self.directory, self.file_name)


class Library:
    """File-metadata store for a single media library."""

    def __init__(
        self,
        config: Optional[Config] = None,
        library_root: str = ".",
        storage: Optional[Storage] = None
    ):
        """Initialize library.

        Args:
            config: Configuration object.
            library_root: Canonical library root directory.
            storage: Storage manager. Created from config if None.
        """
        self.config = config or Config()
        self.library_root = library_root
        self.storage = storage or Storage(self.config, library_root)
        self.supported_formats = self.config.supported_formats

    def find_audio_files(self) -> Iterator[Path]:
        """Recursively find all audio files below the library root.

        The store directory is skipped.

        Yields:
            Path objects for each audio file found.
        """
        root = self.library_root

        if not os.path.isdir(root):
            logger.warning(f"Library directory does not exist: {root}")
            return

        data_dir = os.path.normpath(self.storage.data_dir)
        logger.info(f"Scanning for audio files in: {root}")

        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(
                d for d in dirnames
                if os.path.normpath(os.path.join(dirpath, d)) != data_dir
            )
            for filename in sorted(filenames):
                ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
                if ext in self.supported_formats:
                    yield Path(dirpath) / filename

    def _split(self, file_path: Path) -> tuple:
        """Split an absolute path into (directory, file_name) under the root."""
        relative = os.path.relpath(file_path, self.library_root)
        directory, file_name = os.path.split(relative)
        return Path(directory).as_posix() if directory else "", file_name

    def scan(self) -> List[Dict[str, Any]]:
        """Scan the library and save the file manifest.

        Files already in the manifest keep their id; new files are numbered
        after the highest known id. Files that disappeared are dropped.

        Returns:
            List of file record dictionaries.
        """
        existing = self.storage.load_manifest()
        known_ids = {
            (row.directory, row.file_name): int(row.id)
            for row in existing.itertuples(index=False)
        }
        next_id = max(known_ids.values(), default=0) + 1

        records = []
        for file_path in self.find_audio_files():
            directory, file_name = self._split(file_path)

            file_id = known_ids.get((directory, file_name))
            if file_id is None:
                file_id = next_id
                next_id += 1

            try:
                stat = file_path.stat()
            except OSError as e:
                logger.warning(f"Could not stat {file_path}: {e}")
                continue

            records.append({
                "id": file_id,
                "directory": directory,
                "file_name": file_name,
                "file_size": stat.st_size,
                "mtime": stat.st_mtime,
            })

        self.storage.save_manifest(records)
        logger.info(f"Scan complete: {len(records)} files")

        return records

    def lookup_id_by_path(self, library_root: str, file_path: str) -> int:
        """Resolve a file path to its item id.

        Relative paths are taken relative to the current working directory.

        Args:
            library_root: Canonical library root the lookup is scoped to.
            file_path: Path of a file inside the library.

        Returns:
            Item id of the file.

        Raises:
            NotFoundError: If the path is outside the library or unknown.
        """
        absolute = os.path.realpath(os.path.abspath(file_path))
        relative = os.path.relpath(absolute, library_root)

        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            raise NotFoundError(f"File is not inside the library: {file_path}")

        directory, file_name = os.path.split(relative)
        directory = Path(directory).as_posix() if directory else ""

        df = self.storage.load_manifest()
        matches = df[(df["directory"] == directory) & (df["file_name"] == file_name)]

        if matches.empty:
            raise NotFoundError(f"File not found in library: {file_path}")

        return int(matches.iloc[0]["id"])

    def lookup_records_by_ids(self, ids: Iterable[int]) -> Dict[int, FileRecord]:
        """Fetch the file records for a set of ids in a single pass.

        Args:
            ids: Item ids to look up.

        Returns:
            Mapping of id to FileRecord. Unknown ids are absent.
        """
        wanted = {int(i) for i in ids}
        if not wanted:
            return {}

        df = self.storage.load_manifest()
        rows = df[df["id"].isin(wanted)]

        return {
            int(row.id): FileRecord(int(row.id), row.directory, row.file_name)
            for row in rows.itertuples(index=False)
        }
