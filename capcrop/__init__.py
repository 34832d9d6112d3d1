"""
capcrop - crop, normalize and caption images for a training dataset.

The :class:`~capcrop.session.Workspace` is the entry point used by the
command-line interface; it opens a folder into a
:class:`~capcrop.session.Session` that normalizes selections and keeps the
caption dictionary in sync.
"""

from .models import DictionaryEntry, ImageMetadata, OutputDimensions, Selection
from .session import Session, Workspace

__all__ = ['DictionaryEntry', 'ImageMetadata', 'OutputDimensions', 'Selection', 'Session', 'Workspace']
