"""Caption dictionary persistence."""

from .store import DictionaryStore, caption_path_for, output_path_for

__all__ = ["DictionaryStore", "caption_path_for", "output_path_for"]
