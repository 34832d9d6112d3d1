"""Records shared by the normalizer, the dictionary store and the session."""
from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, NamedTuple

from .constants import DEFAULT_OUTPUT_HEIGHT, DEFAULT_OUTPUT_WIDTH, LEGACY_SELECTION

SELECTION_KEYS = ("x", "y", "width", "height")


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _json_number(value: float) -> float | int:
    # Integral floats are written the way a browser would write them (10, not 10.0)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass(slots=True, frozen=True)
class Selection:
    """A rectangle in source-image pixel coordinates.

    Values are kept exactly as supplied; they may be fractional and may lie
    partly or entirely outside the source image.
    """
    x: float
    y: float
    width: float
    height: float

    def rounded(self) -> tuple[int, int, int, int]:
        """Return ``(x, y, width, height)`` rounded to whole pixels, halves rounding up."""
        return tuple(_round_half_up(getattr(self, key)) for key in SELECTION_KEYS)

    def to_dict(self) -> dict[str, float | int]:
        return {key: _json_number(getattr(self, key)) for key in SELECTION_KEYS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Selection:
        """Build a selection from a JSON object, raising ``ValueError`` when it is unusable."""
        if not isinstance(data, Mapping):
            raise ValueError(f"Selection must be an object, got {type(data).__name__}")
        missing = [key for key in SELECTION_KEYS if key not in data]
        if missing:
            raise ValueError(f"Selection is missing {', '.join(missing)}")
        bad = [key for key in SELECTION_KEYS if not _is_number(data[key])]
        if bad:
            raise ValueError(f"Selection has non-numeric {', '.join(bad)}")
        return cls(**{key: data[key] for key in SELECTION_KEYS})

    @classmethod
    def legacy(cls) -> Selection:
        """The selection assumed for entries saved before selections were recorded."""
        return cls(**LEGACY_SELECTION)


@dataclass(slots=True, frozen=True)
class DictionaryEntry:
    """One output image: where it came from, its caption and its crop."""
    image_path: str
    caption: str = ""
    selection: Selection = field(default_factory=Selection.legacy)

    def to_dict(self) -> dict[str, object]:
        return {
            "imagePath": self.image_path,
            "caption": self.caption,
            "selection": self.selection.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DictionaryEntry:
        """Deserialize an entry, filling the fields older documents lack.

        ``caption`` defaults to an empty string and ``selection`` to the legacy
        512x512 rectangle at the origin. Only a missing or non-string
        ``imagePath`` makes the entry unusable (``ValueError``).
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"Entry must be an object, got {type(data).__name__}")
        image_path = data.get("imagePath")
        if not isinstance(image_path, str) or not image_path:
            raise ValueError("Entry has no imagePath")

        caption = data.get("caption")
        if not isinstance(caption, str):
            caption = "" if caption is None else str(caption)

        raw_selection = data.get("selection")
        try:
            selection = Selection.from_dict(raw_selection) if raw_selection is not None else Selection.legacy()
        except ValueError:
            selection = Selection.legacy()

        return cls(image_path=image_path, caption=caption, selection=selection)


@dataclass(slots=True, frozen=True)
class OutputDimensions:
    """Size of every normalized output image."""
    width: int = DEFAULT_OUTPUT_WIDTH
    height: int = DEFAULT_OUTPUT_HEIGHT

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Output dimensions must be positive, got {self.width}x{self.height}")

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


class ImageMetadata(NamedTuple):
    """Basic facts about a source image."""
    width: int
    height: int
    format: str | None
    mode: str
