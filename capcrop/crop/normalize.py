"""Crop, pad and resize a selection into a fixed-size output image."""
from __future__ import annotations

import logging
from pathlib import Path
from tempfile import NamedTemporaryFile

from PIL import Image

from ..constants import BACKGROUND_COLOR, JPEG_QUALITY
from ..errors import MetadataUnavailable, ReadFailure, WriteFailure
from ..models import ImageMetadata, OutputDimensions, Selection
from ..utils.files import apply_default_mode, safe_remove, safe_rename
from .geometry import plan_crop

logger = logging.getLogger(__name__)

__all__ = ["fit_contain", "normalize", "normalize_file", "read_metadata"]


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("LA", "RGBA") or (img.mode == "P" and "transparency" in img.info)


def _background_for(mode: str) -> tuple[int, ...]:
    return BACKGROUND_COLOR if mode == "RGBA" else BACKGROUND_COLOR[:3]


def _open_image(path: Path) -> Image.Image:
    """Decode *path* fully into memory."""
    try:
        with Image.open(path) as img:
            img.load()
            return img.copy()
    except (OSError, Image.DecompressionBombError) as exc:
        message = f"Unable to read image {path}: {exc}"
        logger.error(message)
        raise ReadFailure(path, message) from exc


def read_metadata(path: Path) -> ImageMetadata:
    """Return the dimensions and format of the image at *path* without decoding pixels."""
    source = Path(path)
    try:
        with Image.open(source) as img:
            width, height = img.size
            metadata = ImageMetadata(width, height, img.format, img.mode)
    except (OSError, Image.DecompressionBombError) as exc:
        message = f"Unable to read image {source}: {exc}"
        logger.error(message)
        raise ReadFailure(source, message) from exc

    if not width or not height:
        logger.error("Image has no usable dimensions: %s", source)
        raise MetadataUnavailable(source)
    return metadata


def fit_contain(img: Image.Image, size: tuple[int, int]) -> Image.Image:
    """Scale *img* to fit inside *size* and centre it on a white canvas of exactly *size*.

    Aspect ratio is preserved; the image is never cropped further.
    Unlike ``ImageOps.pad``, a side that scales below one pixel is kept at
    one pixel instead of producing an empty resize.
    """
    target_w, target_h = size
    scale = min(target_w / img.width, target_h / img.height)
    new_w = min(target_w, max(1, round(img.width * scale)))
    new_h = min(target_h, max(1, round(img.height * scale)))

    if (new_w, new_h) != img.size:
        img = img.resize((new_w, new_h), Image.Resampling.LANCZOS)

    canvas = Image.new(img.mode, size, _background_for(img.mode))
    canvas.paste(img, ((target_w - new_w) // 2, (target_h - new_h) // 2))
    return canvas


def normalize(img: Image.Image, selection: Selection, dimensions: OutputDimensions) -> Image.Image:
    """Produce the normalized output for *selection* drawn over *img*.

    The in-bounds part of the selection is extracted and contain-fitted into
    *dimensions*. A selection that misses the image entirely yields a blank
    white tile rather than an error.
    """
    plan = plan_crop(img.width, img.height, selection)

    if plan.is_empty:
        logger.debug("Selection %s does not overlap %sx%s source, using blank tile", selection, img.width, img.height)
        working = Image.new("RGBA", (1, 1), BACKGROUND_COLOR)
    else:
        working = img.convert("RGBA" if _has_alpha(img) else "RGB").crop(plan.box)

    return fit_contain(working, dimensions.size)


def _encode(img: Image.Image, path: Path, image_format: str) -> None:
    if image_format == "JPEG":
        if img.mode == "RGBA":
            flattened = Image.new("RGBA", img.size, BACKGROUND_COLOR)
            flattened.alpha_composite(img)
            img = flattened
        img.convert("RGB").save(path, image_format, quality=JPEG_QUALITY)
    else:
        img.save(path, image_format)


def normalize_file(source: Path, selection: Selection, dimensions: OutputDimensions, output: Path) -> Path:
    """Read *source*, normalize *selection* and write the result to *output*.

    The output format follows the extension of *output*. The file is written
    next to its destination and renamed into place, so an existing output is
    only replaced by a complete image.
    """
    source = Path(source)
    output = Path(output)

    image_format = Image.registered_extensions().get(output.suffix.lower())
    if image_format is None:
        message = f"No image encoder for extension {output.suffix!r}: {output}"
        logger.error(message)
        raise WriteFailure(output, message)

    img = _open_image(source)
    if not img.width or not img.height:
        logger.error("Image has no usable dimensions: %s", source)
        raise MetadataUnavailable(source)

    result = normalize(img, selection, dimensions)

    try:
        with NamedTemporaryFile(dir=output.parent, prefix=".", suffix=output.suffix, delete=False) as tmp:
            tmp_path = Path(tmp.name)
    except OSError as exc:
        message = f"Unable to write {output}: {exc}"
        logger.error(message)
        raise WriteFailure(output, message) from exc

    try:
        _encode(result, tmp_path, image_format)
        apply_default_mode(tmp_path)
        safe_rename(tmp_path, output)
    except (OSError, ValueError) as exc:
        safe_remove(tmp_path)
        message = f"Unable to write {output}: {exc}"
        logger.error(message)
        raise WriteFailure(output, message) from exc

    logger.debug("Wrote %sx%s %s to %s", dimensions.width, dimensions.height, image_format, output)
    return output
