from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image


@pytest.fixture()
def dataset_dir(tmp_path: Path) -> Path:
	folder = tmp_path / "dataset"
	folder.mkdir()
	return folder


@pytest.fixture()
def make_image(dataset_dir: Path) -> Callable[..., Path]:
	def _make(
		name: str,
		size: tuple[int, int] = (800, 600),
		color: tuple[int, ...] = (255, 0, 0),
		mode: str = "RGB",
		folder: Path | None = None,
	) -> Path:
		path = (folder or dataset_dir) / name
		Image.new(mode, size, color).save(path)
		return path

	return _make
