"""
Path helpers for output files and playlists.
"""

import os
from pathlib import Path
from typing import Union

from media_manager.errors import PathError


PathLike = Union[str, os.PathLike]


def normalize_extension(path: PathLike, expected_extension: str) -> Path:
    """Ensure a path carries the expected file extension.

    The comparison is exact and case-sensitive, so ``mix.M3U8`` is
    corrected to ``mix.m3u8``.

    Args:
        path: Output path.
        expected_extension: Extension with or without the leading dot.

    Returns:
        The path with its final suffix replaced, or unchanged if it
        already matches.
    """
    path = Path(path)
    suffix = "." + expected_extension.lstrip(".")

    if path.suffix == suffix or not path.name:
        return path

    return path.with_suffix(suffix)


def relativize(target_path: PathLike, base_directory: PathLike) -> Path:
    """Express a path relative to a base directory.

    Uses ``..`` segments when the target is not below the base. Joining
    the result onto ``base_directory`` gives back ``target_path``.

    Args:
        target_path: Path to express.
        base_directory: Directory the result is relative to.

    Returns:
        Shortest relative path from the base to the target.

    Raises:
        PathError: If one path is absolute and the other is not, or the
            two paths live on different drives.
    """
    target = os.fspath(target_path)
    base = os.fspath(base_directory)

    if os.path.isabs(target) != os.path.isabs(base):
        raise PathError(
            f"Cannot compute relative path from {base} to {target}: "
            "paths must both be absolute or both be relative"
        )

    try:
        return Path(os.path.relpath(target, base))
    except ValueError as e:
        raise PathError(
            f"Cannot compute relative path from {base} to {target}: {e}"
        ) from e
