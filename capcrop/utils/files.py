from __future__ import annotations

import logging
import os
import shutil
from functools import lru_cache
from pathlib import Path
from tempfile import NamedTemporaryFile

from ..constants import CLONE_FIRST_INDEX, IMAGE_FILE_EXTENSIONS

logger = logging.getLogger(__name__)

__all__ = [
    "apply_default_mode",
    "atomic_write_text",
    "copy_file",
    "list_image_files",
    "next_clone_name",
    "safe_remove",
    "safe_rename",
]


def safe_remove(path: Path) -> None:
    """Safely remove a file from disk.

    Directories are not removed; missing files are silently ignored after a debug log.
    """

    target = Path(path)
    if target.is_dir():
        message = f"safe_remove refuses to delete directories: {target}"
        logger.error(message)
        raise IsADirectoryError(message)

    try:
        target.unlink()
    except FileNotFoundError:
        logger.debug("safe_remove skipped missing file: %s", target)
    except OSError as exc:  # pragma: no cover - exercised in failure cases
        message = f"Unable to remove {target}: {exc}"
        logger.error(message)
        raise OSError(message) from exc
    else:
        logger.debug("Removed file: %s", target)


def safe_rename(src: Path, dest: Path) -> None:
    """Rename *src* over *dest* with helpful error reporting."""

    origin = Path(src)
    target = Path(dest)

    if not origin.exists():
        message = f"Source path does not exist: {origin}"
        logger.error(message)
        raise FileNotFoundError(message)

    if not target.parent.exists():
        message = f"Destination directory does not exist: {target.parent}"
        logger.error(message)
        raise FileNotFoundError(message)

    try:
        origin.replace(target)
    except OSError as exc:  # pragma: no cover - exercised in failure cases
        message = f"Unable to rename {origin} -> {target}: {exc}"
        logger.error(message)
        raise OSError(message) from exc
    else:
        logger.debug("Renamed %s -> %s", origin, target)


@lru_cache(maxsize=1)
def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def apply_default_mode(path: Path) -> None:
    """Give *path* the mode a plain new file would get (0o666 less the umask).

    Temporary files are created 0o600; renaming one into place keeps that mode.
    """
    os.chmod(path, 0o666 & ~_current_umask())


def atomic_write_text(path: Path, text: str) -> None:
    """Write *text* as UTF-8 to *path* so readers see either the old or the new content."""

    target = Path(path)
    with NamedTemporaryFile(
        "w", encoding="utf-8", newline="", dir=target.parent, prefix=".", suffix=".tmp", delete=False
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(text)
        except OSError:
            tmp.close()
            safe_remove(tmp_path)
            raise

    try:
        apply_default_mode(tmp_path)
        safe_rename(tmp_path, target)
    except OSError:
        safe_remove(tmp_path)
        raise


def list_image_files(folder: Path) -> list[str]:
    """Return all non-hidden image filenames in a folder, sorted."""
    files: list[str] = []
    with os.scandir(folder) as it:
        for e in it:
            if e.is_file() and not e.name.startswith('.'):
                _, ext = os.path.splitext(e.name)
                if ext.lower() in IMAGE_FILE_EXTENSIONS:
                    files.append(e.name)
    files.sort(key=lambda n: n.lower())
    return files


def next_clone_name(folder: Path, filename: str) -> str:
    """First ``<stem>_<n><ext>`` in *folder* that does not exist yet."""
    original = Path(filename)
    counter = CLONE_FIRST_INDEX
    while True:
        candidate = f"{original.stem}_{counter}{original.suffix}"
        if not (Path(folder) / candidate).exists():
            return candidate
        counter += 1


def copy_file(src: Path, dest: Path) -> None:
    """Copy *src* to *dest* (contents and metadata)."""

    origin = Path(src)
    target = Path(dest)
    if not origin.is_file():
        message = f"Source path does not exist: {origin}"
        logger.error(message)
        raise FileNotFoundError(message)

    try:
        shutil.copy2(origin, target)
    except OSError as exc:
        message = f"Unable to copy {origin} -> {target}: {exc}"
        logger.error(message)
        raise OSError(message) from exc
    else:
        logger.debug("Copied %s -> %s", origin, target)
