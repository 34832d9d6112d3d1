"""
In-memory caption dictionary backed by ``image_captions.json``.

The store maps each output image path to the entry describing where it came
from. The JSON document is an array of entries; keys are rebuilt on load from
the basename of each ``imagePath``. Every save also mirrors each caption into
a ``<stem>.txt`` file beside the outputs.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterator, Optional

from ..constants import CAPTION_SUFFIX, DICTIONARY_FILENAME
from ..errors import DictionaryLoadFailure, DictionaryPersistFailure
from ..models import DictionaryEntry, Selection
from ..utils.files import atomic_write_text

logger = logging.getLogger(__name__)


def output_path_for(output_dir: Path, image_path: str) -> Path:
    """Path of the output image derived from a source-relative *image_path*."""
    return Path(output_dir) / Path(image_path).name


def caption_path_for(output_dir: Path, image_path: str) -> Path:
    """Path of the caption text file mirroring *image_path*'s entry."""
    return Path(output_dir) / f"{Path(image_path).stem}{CAPTION_SUFFIX}"


class DictionaryStore:
    """Caption dictionary for one output directory."""

    def __init__(self) -> None:
        self._entries: dict[Path, DictionaryEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, output_path: object) -> bool:
        return isinstance(output_path, (str, Path)) and Path(output_path) in self._entries

    def __iter__(self) -> Iterator[Path]:
        return iter(self._entries)

    def get(self, output_path: Path) -> Optional[DictionaryEntry]:
        return self._entries.get(Path(output_path))

    def entries(self) -> list[DictionaryEntry]:
        """All entries, in insertion order."""
        return list(self._entries.values())

    def selection_for(self, image_path: str) -> Optional[Selection]:
        """Selection stored for the source *image_path*, or ``None``.

        Matches on the entry's ``image_path`` field, not on the output key.
        """
        for entry in self._entries.values():
            if entry.image_path == image_path:
                return entry.selection
        return None

    def upsert(self, output_path: Path, entry: DictionaryEntry) -> None:
        """Insert or replace the entry for *output_path* (memory only)."""
        key = Path(output_path)
        if key in self._entries and self._entries[key].image_path != entry.image_path:
            logger.warning(
                'Entry for "%s" replaces "%s" (same output name)', entry.image_path, self._entries[key].image_path
            )
        self._entries[key] = entry

    def load(self, output_dir: Path) -> None:
        """Replace the contents of the store with the dictionary in *output_dir*.

        A missing file leaves the store empty. A malformed file is logged and
        also leaves the store empty; it never raises.
        """
        output_dir = Path(output_dir)
        path = output_dir / DICTIONARY_FILENAME
        self._entries = {}

        if not path.exists():
            logger.info("No existing dictionary file found in %s", output_dir)
            return

        try:
            document = self._read_document(path)
        except DictionaryLoadFailure as exc:
            logger.error("Error loading image dictionary: %s", exc)
            return

        entries: dict[Path, DictionaryEntry] = {}
        for index, item in enumerate(document):
            try:
                entry = DictionaryEntry.from_dict(item)
            except ValueError as exc:
                logger.warning("Skipping dictionary item %d in %s: %s", index, path, exc)
                continue
            entries[output_path_for(output_dir, entry.image_path)] = entry

        self._entries = entries
        logger.info("Loaded %d dictionary entries from %s", len(entries), path)

    @staticmethod
    def _read_document(path: Path) -> list:
        try:
            document = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DictionaryLoadFailure(path, f"Unable to parse {path}: {exc}") from exc
        if not isinstance(document, list):
            raise DictionaryLoadFailure(path, f"Expected a JSON array in {path}, got {type(document).__name__}")
        return document

    def dumps(self) -> str:
        """The JSON document :meth:`save` writes."""
        return json.dumps([entry.to_dict() for entry in self._entries.values()], indent=2, ensure_ascii=False)

    def save(self, output_dir: Path) -> None:
        """Write the dictionary and one caption file per entry into *output_dir*.

        Raises:
            DictionaryPersistFailure: if any file could not be written
        """
        output_dir = Path(output_dir)
        path = output_dir / DICTIONARY_FILENAME

        try:
            atomic_write_text(path, self.dumps())
        except OSError as exc:
            message = f"Unable to save image dictionary to {path}: {exc}"
            logger.error(message)
            raise DictionaryPersistFailure(path, message) from exc
        logger.debug("Saved image dictionary to %s", path)

        for entry in self._entries.values():
            caption_path = caption_path_for(output_dir, entry.image_path)
            try:
                atomic_write_text(caption_path, entry.caption)
            except OSError as exc:
                message = f"Unable to write caption file {caption_path}: {exc}"
                logger.error(message)
                raise DictionaryPersistFailure(caption_path, message) from exc
        logger.debug("Saved %d caption files to %s", len(self._entries), output_dir)
