"""
Session state for one opened dataset folder.

A :class:`Session` bundles the folder, its output directory, the output size
and the caption dictionary. Opening another folder builds a new session; a
session is never partially reset. :class:`Workspace` holds whichever session
is current and answers requests made before any folder was opened.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .constants import OUTPUT_SUBDIR
from .crop import normalize_file, read_metadata
from .dictionary import DictionaryStore, output_path_for
from .errors import NoFolderSelected, ReadFailure, WriteFailure
from .models import DictionaryEntry, ImageMetadata, OutputDimensions, Selection
from .utils.files import copy_file, list_image_files, next_clone_name

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Everything the crop and caption operations need for one folder."""
    folder: Path
    dimensions: OutputDimensions = field(default_factory=OutputDimensions)
    store: DictionaryStore = field(default_factory=DictionaryStore)

    @classmethod
    def open(cls, folder: Path, dimensions: Optional[OutputDimensions] = None) -> Session:
        """Start a session on *folder*, resuming any dictionary saved there before."""
        session = cls(Path(folder), dimensions or OutputDimensions())
        session.store.load(session.output_dir)
        logger.info('Opened "%s" (%d saved selections)', session.folder, len(session.store))
        return session

    @property
    def output_dir(self) -> Path:
        return self.folder / OUTPUT_SUBDIR

    def source_path(self, filename: str) -> Path:
        return self.folder / filename

    def list_images(self) -> list[str]:
        """Image filenames in the folder."""
        try:
            return list_image_files(self.folder)
        except OSError as exc:
            message = f"Error reading directory {self.folder}: {exc}"
            logger.error(message)
            raise ReadFailure(self.folder, message) from exc

    def image_metadata(self, filename: str) -> ImageMetadata:
        return read_metadata(self.source_path(filename))

    def save_selection(self, image_path: str, selection: Selection, caption: str = "") -> Path:
        """Write the normalized output for *selection* and record it in the dictionary.

        The dictionary is only touched once the output image exists, so a
        failed crop leaves earlier entries and files as they were.

        Args:
            image_path: Source image, relative to the folder
            selection: Rectangle in source pixel coordinates
            caption: Caption to store with the output

        Returns:
            Path of the written output image
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            message = f"Unable to create output directory {self.output_dir}: {exc}"
            logger.error(message)
            raise WriteFailure(self.output_dir, message) from exc

        output_path = output_path_for(self.output_dir, image_path)
        normalize_file(self.source_path(image_path), selection, self.dimensions, output_path)

        self.store.upsert(output_path, DictionaryEntry(image_path=image_path, caption=caption or "", selection=selection))
        self.store.save(self.output_dir)

        logger.info('Saved cropped and resized image: "%s"', output_path)
        return output_path

    def entries(self) -> list[DictionaryEntry]:
        return self.store.entries()

    def selection_for(self, image_path: str) -> Optional[Selection]:
        return self.store.selection_for(image_path)

    def clone_image(self, filename: str) -> str:
        """Copy a source image to the next free ``<stem>_<n><ext>`` and return the new name."""
        source = self.source_path(filename)
        if not source.is_file():
            message = f"Image not found: {source}"
            logger.error(message)
            raise ReadFailure(source, message)

        new_name = next_clone_name(self.folder, filename)
        target = self.source_path(new_name)
        try:
            copy_file(source, target)
        except OSError as exc:
            raise WriteFailure(target, f"Error cloning image {filename}: {exc}") from exc

        logger.info('Cloned image "%s" to "%s"', filename, new_name)
        return new_name


class Workspace:
    """Holds the current session, if a folder has been opened."""

    def __init__(self, dimensions: Optional[OutputDimensions] = None):
        self.dimensions = dimensions or OutputDimensions()
        self._session: Optional[Session] = None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    def open_folder(self, folder: Path) -> Session:
        """Replace the current session with a fresh one for *folder*."""
        self._session = Session.open(folder, self.dimensions)
        return self._session

    def _require_session(self) -> Session:
        if self._session is None:
            logger.error("No folder selected")
            raise NoFolderSelected()
        return self._session

    def list_images(self) -> list[str]:
        return self._session.list_images() if self._session else []

    def image_metadata(self, filename: str) -> ImageMetadata:
        return self._require_session().image_metadata(filename)

    def save_selection(self, image_path: str, selection: Selection, caption: str = "") -> Path:
        return self._require_session().save_selection(image_path, selection, caption)

    def entries(self) -> list[DictionaryEntry]:
        return self._session.entries() if self._session else []

    def selection_for(self, image_path: str) -> Optional[Selection]:
        return self._session.selection_for(image_path) if self._session else None

    def clone_image(self, filename: str) -> str:
        return self._require_session().clone_image(filename)
