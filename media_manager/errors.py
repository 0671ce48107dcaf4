"""
Exceptions raised by the recommendation export pipeline.
"""


class MediaManagerError(Exception):
    """Base class for all media manager errors."""


class UsageError(MediaManagerError):
    """A required option or option combination is missing."""


class NotFoundError(MediaManagerError):
    """An identifier does not resolve to a library file."""


class RetrievalError(MediaManagerError):
    """The recommendation backend is unavailable or does not know the item."""


class OutputError(MediaManagerError):
    """Creating or writing an output file failed."""


class PathError(MediaManagerError):
    """A relative path between two locations cannot be computed."""


class UnsupportedFormatError(MediaManagerError):
    """The requested output format is not recognised."""

    def __init__(self, format_name: str):
        self.format_name = format_name
        super().__init__(
            f"Unsupported format '{format_name}'. "
            "Supported formats are 'json' and 'm3u8'."
        )
