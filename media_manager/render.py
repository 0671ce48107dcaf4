"""
Rendering of recommendation results as a table, JSON file or M3U8 playlist.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Iterable, List, Optional, Sequence, Tuple

from rich.cells import cell_len
from rich.console import Console
from rich.segment import Segments
from rich.table import Table
from rich.text import Text

from media_manager.errors import OutputError, UnsupportedFormatError, UsageError
from media_manager.library import FileRecord
from media_manager.paths import normalize_extension, relativize
from media_manager.recommender import RecommendationEntry


logger = logging.getLogger(__name__)


ResolvedEntry = Tuple[RecommendationEntry, Optional[FileRecord]]


class OutputFormat(Enum):
    TABLE = "table"
    JSON = "json"
    M3U8 = "m3u8"


@dataclass(frozen=True)
class RenderTarget:
    """Where and how recommendations are rendered."""

    format: OutputFormat
    output_path: Optional[Path] = None

    @classmethod
    def from_options(
        cls,
        format_name: Optional[str],
        output: Optional[str]
    ) -> "RenderTarget":
        """Build a target from command line options.

        Args:
            format_name: ``json``, ``m3u8`` or None for a console table.
            output: Output file path, required for file formats.

        Raises:
            UnsupportedFormatError: For any other format name.
            UsageError: If a file format is selected without an output path.
        """
        if format_name is None:
            if output is not None:
                logger.warning(f"Ignoring output path {output}: no format selected")
            return cls(OutputFormat.TABLE)

        if format_name not in (OutputFormat.JSON.value, OutputFormat.M3U8.value):
            raise UnsupportedFormatError(format_name)

        if not output:
            raise UsageError("Output file path is required when format is specified")

        return cls(OutputFormat(format_name), Path(output))


@dataclass
class RenderResult:
    """Outcome of a render call."""

    format: OutputFormat
    output_path: Optional[Path] = None
    rendered: int = 0
    skipped: int = 0
    warnings: List[str] = field(default_factory=list)


def _joined(resolved: Iterable[ResolvedEntry]) -> List[Tuple[RecommendationEntry, FileRecord]]:
    return [(entry, record) for entry, record in resolved if record is not None]


def render_table(
    resolved: Sequence[ResolvedEntry],
    library_root: str,
    console: Optional[Console] = None
) -> RenderResult:
    """Print recommendations as a table.

    Args:
        resolved: Entries paired with their file records, in retrieval order.
        library_root: Canonical library root.
        console: Console to print to. Defaults to standard output.

    Returns:
        Render result.
    """
    console = console or Console()
    joined = _joined(resolved)

    headers = ("ID", "Distance", "File Path")
    rows = [
        (
            f"{entry.item_id:05d}",
            f"{entry.distance:.4f}",
            str(record.absolute_path(library_root)),
        )
        for entry, record in joined
    ]

    table = Table(show_edge=False, box=None, header_style="bold")
    table.add_column(headers[0], justify="right", no_wrap=True)
    table.add_column(headers[1], justify="right", no_wrap=True)
    table.add_column(headers[2], no_wrap=True)

    for item_id, distance, path in rows:
        table.add_row(item_id, distance, Text(path))

    # Paths are never shrunk to the terminal width: lay the table out at its
    # natural width and let long lines run past the edge uncropped.
    natural_width = sum(
        max(cell_len(value) for value in column) + 2
        for column in zip(headers, *rows)
    )
    options = console.options.update_width(max(natural_width, console.width))
    console.print(Segments(console.render(table, options)), crop=False)

    return RenderResult(
        OutputFormat.TABLE,
        rendered=len(joined),
        skipped=len(resolved) - len(joined),
    )


def _prepare_output(output_path: Path, extension: str, library_root: str) -> Tuple[Path, List[str]]:
    """Resolve an output path against the library root and normalize its extension."""
    warnings = []

    path = Path(library_root, output_path)
    corrected = normalize_extension(path, extension)
    if corrected != path:
        warnings.append(f"Output file extension corrected to .{extension}")
        logger.warning(f"Output path {path} corrected to {corrected}")

    return corrected, warnings


def _write_atomic(path: Path, lines: Iterable[str]) -> None:
    """Create parent directories, write text to a temporary file and move it into place."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(f"Failed to create directories: {e}") from e

    temp_name = None
    try:
        with NamedTemporaryFile(
            "w",
            encoding="utf-8",
            newline="",
            delete=False,
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_name = tmp.name
            for line in lines:
                tmp.write(line)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(temp_name, path)
    except OSError as e:
        _discard(temp_name)
        raise OutputError(f"Failed to write to file {path}: {e}") from e
    except Exception:
        _discard(temp_name)
        raise


def _discard(temp_name: Optional[str]) -> None:
    if temp_name and os.path.exists(temp_name):
        os.unlink(temp_name)


def render_json(
    resolved: Sequence[ResolvedEntry],
    output_path: Path,
    library_root: str
) -> RenderResult:
    """Write the raw recommendation entries to a JSON file.

    Every entry is written, joined or not, as an ``[id, distance]`` pair.

    Args:
        resolved: Entries paired with their file records, in retrieval order.
        output_path: Requested output path, relative to the library root
            unless absolute.
        library_root: Canonical library root.

    Returns:
        Render result naming the written file.
    """
    path, warnings = _prepare_output(output_path, OutputFormat.JSON.value, library_root)

    entries = [[entry.item_id, entry.distance] for entry, _ in resolved]
    _write_atomic(path, [json.dumps(entries, separators=(",", ":"))])

    logger.info(f"Wrote {len(entries)} recommendations to {path}")
    return RenderResult(OutputFormat.JSON, path, rendered=len(entries), warnings=warnings)


def render_m3u8(
    resolved: Sequence[ResolvedEntry],
    output_path: Path,
    library_root: str
) -> RenderResult:
    """Write recommendations as an M3U8 playlist.

    Paths are written relative to the playlist's own directory.

    Args:
        resolved: Entries paired with their file records, in retrieval order.
        output_path: Requested output path, relative to the library root
            unless absolute.
        library_root: Canonical library root.

    Returns:
        Render result naming the written file.
    """
    path, warnings = _prepare_output(output_path, OutputFormat.M3U8.value, library_root)
    joined = _joined(resolved)

    # Compute every line before touching the file so a PathError leaves nothing behind
    lines = ["#EXTM3U\n"]
    for _, record in joined:
        relative = relativize(record.absolute_path(library_root), path.parent)
        lines.append(f"{relative}\n")

    _write_atomic(path, lines)

    logger.info(f"Wrote {len(joined)} playlist entries to {path}")
    return RenderResult(
        OutputFormat.M3U8,
        path,
        rendered=len(joined),
        skipped=len(resolved) - len(joined),
        warnings=warnings,
    )


def render(
    resolved: Sequence[ResolvedEntry],
    target: RenderTarget,
    library_root: str,
    console: Optional[Console] = None
) -> RenderResult:
    """Render recommendations to the given target.

    Args:
        resolved: Entries paired with their file records, in retrieval order.
        target: Output format and path.
        library_root: Canonical library root.
        console: Console used for table output.

    Returns:
        Render result.
    """
    if target.format is OutputFormat.TABLE:
        return render_table(resolved, library_root, console)

    if target.output_path is None:
        raise UsageError("Output file path is required when format is specified")

    if target.format is OutputFormat.JSON:
        return render_json(resolved, target.output_path, library_root)

    return render_m3u8(resolved, target.output_path, library_root)
