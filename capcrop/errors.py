"""Error types raised by capcrop operations."""
from __future__ import annotations

from pathlib import Path


class CapcropError(Exception):
    """Base class for every failure surfaced to the caller."""


class NoFolderSelected(CapcropError):
    """Raised when an operation needs an open folder and none is open."""

    def __init__(self, message: str = "No folder selected") -> None:
        super().__init__(message)


class MetadataUnavailable(CapcropError):
    """Raised when a source image has no usable width/height."""

    def __init__(self, path: Path, message: str | None = None) -> None:
        self.path = Path(path)
        super().__init__(message or f"Could not get image dimensions: {self.path}")


class _PathError(CapcropError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(message)


class ReadFailure(_PathError):
    """A file could not be read or decoded."""


class WriteFailure(_PathError):
    """A file could not be written or encoded."""


class DictionaryLoadFailure(_PathError):
    """The dictionary document exists but cannot be used.

    Only raised inside :meth:`DictionaryStore.load`, which recovers from it.
    """


class DictionaryPersistFailure(_PathError):
    """The dictionary or its caption files could not be written."""
