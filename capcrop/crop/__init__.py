"""Selection normalization: clamp, extract, contain-fit, encode."""

from .geometry import CropPlan, plan_crop
from .normalize import fit_contain, normalize, normalize_file, read_metadata

__all__ = ["CropPlan", "fit_contain", "normalize", "normalize_file", "plan_crop", "read_metadata"]
