from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image, features

from capcrop.crop import fit_contain, normalize, normalize_file, read_metadata
from capcrop.errors import ReadFailure, WriteFailure
from capcrop.models import OutputDimensions, Selection

RED = (255, 0, 0)
WHITE = (255, 255, 255)


def _close(pixel: tuple[int, ...], expected: tuple[int, ...], tolerance: int = 3) -> bool:
	return all(abs(a - b) <= tolerance for a, b in zip(pixel, expected))


def _quadrants() -> Image.Image:
	img = Image.new("RGB", (200, 200), (0, 0, 255))
	img.paste(RED, (0, 0, 100, 100))
	img.paste((0, 255, 0), (100, 0, 200, 100))
	return img


def test_inside_selection_extracts_exact_region() -> None:
	result = normalize(_quadrants(), Selection(0, 0, 100, 100), OutputDimensions(64, 64))
	assert result.size == (64, 64)
	for xy in [(0, 0), (32, 32), (63, 63)]:
		assert _close(result.getpixel(xy), RED)


def test_left_overflow_is_letterboxed_with_white() -> None:
	source = Image.new("RGB", (800, 600), RED)
	result = normalize(source, Selection(-50, 0, 300, 300), OutputDimensions(512, 512))
	assert result.size == (512, 512)
	# 250x300 crop scaled to 427x512, centred horizontally
	assert result.getpixel((5, 256)) == WHITE
	assert result.getpixel((506, 256)) == WHITE
	assert _close(result.getpixel((256, 256)), RED)


def test_selection_outside_source_yields_white_tile() -> None:
	source = Image.new("RGB", (800, 600), RED)
	result = normalize(source, Selection(1000, 1000, 50, 50), OutputDimensions(512, 512))
	assert result.size == (512, 512)
	assert result.convert("RGB").getcolors() == [(512 * 512, WHITE)]


@pytest.mark.parametrize(
	("selection", "dimensions"),
	[
		(Selection(0, 0, 800, 600), OutputDimensions(512, 512)),
		(Selection(10.2, 20.7, 33.3, 500.9), OutputDimensions(300, 200)),
		(Selection(-400, -400, 2000, 30), OutputDimensions(1024, 768)),
		(Selection(799, 599, 1, 1), OutputDimensions(64, 128)),
	],
)
def test_output_always_has_configured_size(selection: Selection, dimensions: OutputDimensions) -> None:
	source = Image.new("RGB", (800, 600), RED)
	assert normalize(source, selection, dimensions).size == dimensions.size


def test_fit_contain_keeps_extreme_aspect_ratio_visible() -> None:
	strip = Image.new("RGB", (1, 5000), RED)
	result = fit_contain(strip, (100, 100))
	assert result.size == (100, 100)
	assert result.getpixel((0, 0)) == WHITE


def test_transparency_is_kept_inside_crop() -> None:
	source = Image.new("RGBA", (100, 50), (0, 0, 0, 0))
	result = normalize(source, Selection(0, 0, 100, 50), OutputDimensions(100, 100))
	assert result.mode == "RGBA"
	assert result.getpixel((50, 10)) == (255, 255, 255, 255)
	assert result.getpixel((50, 50)) == (0, 0, 0, 0)


def test_normalize_file_writes_jpeg_of_configured_size(make_image, tmp_path: Path) -> None:
	source = make_image("photo.jpg")
	output = tmp_path / "photo.jpg"

	written = normalize_file(source, Selection(-50, 0, 300, 300), OutputDimensions(512, 512), output)

	assert written == output
	with Image.open(output) as img:
		assert img.format == "JPEG"
		assert img.size == (512, 512)
	assert sorted(p.name for p in tmp_path.iterdir()) == ["dataset", "photo.jpg"]


def test_normalize_file_flattens_blank_tile_for_jpeg(make_image, tmp_path: Path) -> None:
	source = make_image("photo.jpg")
	output = tmp_path / "out.jpg"
	normalize_file(source, Selection(5000, 5000, 10, 10), OutputDimensions(32, 32), output)
	with Image.open(output) as img:
		assert img.mode == "RGB"
		assert _close(img.getpixel((16, 16)), WHITE)


def test_normalize_file_keeps_png_format(make_image, tmp_path: Path) -> None:
	source = make_image("icon.png", size=(40, 40), color=(0, 0, 0, 0), mode="RGBA")
	output = tmp_path / "icon.png"
	normalize_file(source, Selection(0, 0, 40, 20), OutputDimensions(40, 40), output)
	with Image.open(output) as img:
		assert img.format == "PNG"
		assert img.size == (40, 40)
		assert img.getpixel((20, 2)) == (255, 255, 255, 255)
		assert img.getpixel((20, 20)) == (0, 0, 0, 0)


@pytest.mark.skipif(not features.check("webp"), reason="Pillow built without WebP")
def test_normalize_file_keeps_webp_format(make_image, tmp_path: Path) -> None:
	source = make_image("frame.webp", size=(64, 48))
	output = tmp_path / "frame.webp"
	normalize_file(source, Selection(0, 0, 64, 48), OutputDimensions(32, 32), output)
	with Image.open(output) as img:
		assert img.format == "WEBP"
		assert img.size == (32, 32)


def test_normalize_file_rejects_corrupt_source(dataset_dir: Path, tmp_path: Path) -> None:
	broken = dataset_dir / "broken.jpg"
	broken.write_bytes(b"definitely not a jpeg")
	with pytest.raises(ReadFailure):
		normalize_file(broken, Selection(0, 0, 10, 10), OutputDimensions(16, 16), tmp_path / "broken.jpg")
	assert not (tmp_path / "broken.jpg").exists()


def test_normalize_file_missing_source(dataset_dir: Path, tmp_path: Path) -> None:
	with pytest.raises(ReadFailure):
		normalize_file(dataset_dir / "nope.png", Selection(0, 0, 10, 10), OutputDimensions(16, 16), tmp_path / "nope.png")


def test_normalize_file_unknown_extension(make_image, tmp_path: Path) -> None:
	source = make_image("photo.jpg")
	with pytest.raises(WriteFailure):
		normalize_file(source, Selection(0, 0, 10, 10), OutputDimensions(16, 16), tmp_path / "photo.unknownext")


def test_normalize_file_unwritable_destination(make_image, tmp_path: Path) -> None:
	source = make_image("photo.jpg")
	with pytest.raises(WriteFailure):
		normalize_file(source, Selection(0, 0, 10, 10), OutputDimensions(16, 16), tmp_path / "missing" / "photo.jpg")


def test_read_metadata(make_image) -> None:
	meta = read_metadata(make_image("photo.png", size=(320, 240)))
	assert (meta.width, meta.height) == (320, 240)
	assert meta.format == "PNG"


def test_read_metadata_corrupt(dataset_dir: Path) -> None:
	broken = dataset_dir / "broken.png"
	broken.write_bytes(b"\x00\x01")
	with pytest.raises(ReadFailure):
		read_metadata(broken)
