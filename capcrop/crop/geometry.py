"""Where a selection lands on its source image."""
from __future__ import annotations

from typing import NamedTuple

from ..models import Selection


class CropPlan(NamedTuple):
    """Overflow on each side of the source and the in-bounds region to extract."""
    left_pad: int
    top_pad: int
    right_pad: int
    bottom_pad: int
    x: int
    y: int
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        """True when the selection does not overlap the source at all."""
        return self.width <= 0 or self.height <= 0

    @property
    def box(self) -> tuple[int, int, int, int]:
        """The region as a Pillow ``(left, upper, right, lower)`` box."""
        return self.x, self.y, self.x + self.width, self.y + self.height


def plan_crop(source_width: int, source_height: int, selection: Selection) -> CropPlan:
    """Clamp a rounded selection to the source bounds.

    Args:
        source_width: Width of the source image in pixels
        source_height: Height of the source image in pixels
        selection: Rectangle drawn by the user, possibly exceeding the source

    Returns:
        The plan; its width or height is zero or negative when nothing overlaps
    """
    x, y, width, height = selection.rounded()

    left_pad = max(0, -x)
    top_pad = max(0, -y)
    right_pad = max(0, x + width - source_width)
    bottom_pad = max(0, y + height - source_height)

    actual_x = max(0, x)
    actual_y = max(0, y)
    actual_width = min(width - left_pad - right_pad, source_width - actual_x)
    actual_height = min(height - top_pad - bottom_pad, source_height - actual_y)

    return CropPlan(left_pad, top_pad, right_pad, bottom_pad, actual_x, actual_y, actual_width, actual_height)
