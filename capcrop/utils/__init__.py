"""Shared utility helpers for the capcrop project."""

from .files import apply_default_mode, atomic_write_text, copy_file, list_image_files, next_clone_name, safe_remove, safe_rename

__all__ = [
    "apply_default_mode",
    "atomic_write_text",
    "copy_file",
    "list_image_files",
    "next_clone_name",
    "safe_remove",
    "safe_rename",
]
