"""Shared fixtures: small synthetic images written to a temporary directory."""

from pathlib import Path
from typing import Callable, Optional

import numpy as np
import pytest
from PIL import ExifTags, Image


def gradient(width: int, height: int) -> Image.Image:
    """RGB image whose red channel follows x and green channel follows y."""
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[..., 0] = xs[np.newaxis, :].astype(np.uint8)
    arr[..., 1] = ys[:, np.newaxis].astype(np.uint8)
    arr[..., 2] = 128
    return Image.fromarray(arr, mode="RGB")


def half_transparent(width: int, height: int, color=(255, 0, 0)) -> Image.Image:
    """RGBA image: left half fully transparent, right half opaque `color` (red by default)."""
    arr = np.zeros((height, width, 4), dtype=np.uint8)
    arr[:, width // 2:] = (*color, 255)
    return Image.fromarray(arr, mode="RGBA")


@pytest.fixture
def make_jpeg(tmp_path: Path) -> Callable[..., Path]:
    def _make(width: int, height: int, orientation: Optional[int] = None, name: str = "src.jpg") -> Path:
        path = tmp_path / name
        img = gradient(width, height)
        if orientation is None:
            img.save(path, "JPEG", quality=90)
        else:
            exif = Image.Exif()
            exif[ExifTags.Base.Orientation] = orientation
            img.save(path, "JPEG", quality=90, exif=exif.tobytes())
        return path

    return _make


@pytest.fixture
def make_png(tmp_path: Path) -> Callable[..., Path]:
    def _make(img: Image.Image, name: str = "src.png") -> Path:
        path = tmp_path / name
        img.save(path, "PNG")
        return path

    return _make


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    d = tmp_path / "out"
    d.mkdir()
    return d
