"""Tests for extension-based output encoding."""

import pytest
from PIL import Image

from image_resize import encoders
from image_resize.encoders import EncodeOptions, encode, preserves_transparency
from image_resize.errors import OutputError

from .conftest import gradient, half_transparent


@pytest.mark.parametrize(
    "name,fmt",
    [
        ("out.gif", "GIF"),
        ("out.png", "PNG"),
        ("out.PNG", "PNG"),
        ("out.tiff", "TIFF"),
        ("out.tif", "TIFF"),
        ("out.bmp", "BMP"),
        ("out.jpg", "JPEG"),
        ("out.jpeg", "JPEG"),
        ("out.webp", "JPEG"),
        ("out", "JPEG"),
    ],
)
def test_format_selected_by_extension(out_dir, name, fmt):
    path = out_dir / name
    encode(gradient(32, 24), str(path))
    with Image.open(path) as out:
        assert out.format == fmt
        assert out.size == (32, 24)


def test_png_keeps_alpha(out_dir):
    path = out_dir / "alpha.png"
    encode(half_transparent(20, 10), str(path))
    with Image.open(path) as out:
        assert out.mode == "RGBA"
        assert out.getpixel((2, 2))[3] == 0


def test_jpeg_drops_alpha_channel(out_dir):
    path = out_dir / "alpha.jpg"
    encode(half_transparent(20, 10), str(path))
    with Image.open(path) as out:
        assert out.mode == "RGB"


def test_jpeg_quality_affects_size(out_dir):
    img = gradient(128, 128)
    low, high = out_dir / "low.jpg", out_dir / "high.jpg"
    encode(img, str(low), EncodeOptions(quality=5))
    encode(img, str(high), EncodeOptions(quality=100))
    assert low.stat().st_size < high.stat().st_size


def test_out_of_range_quality_uses_default(out_dir):
    img = gradient(64, 64)
    default, bogus = out_dir / "default.jpg", out_dir / "bogus.jpg"
    encode(img, str(default), EncodeOptions(quality=75))
    encode(img, str(bogus), EncodeOptions(quality=500))
    assert default.read_bytes() == bogus.read_bytes()


def test_gif_reuses_source_palette_size(out_dir):
    path = out_dir / "small.gif"
    encode(gradient(64, 64), str(path), EncodeOptions(palette_size=16))
    with Image.open(path) as out:
        assert out.mode == "P"
        assert len(out.getcolors(256)) <= 16


def test_gif_adaptive_palette_by_default(out_dir):
    path = out_dir / "adaptive.gif"
    encode(gradient(64, 64), str(path))
    with Image.open(path) as out:
        assert out.mode == "P"
        assert 16 < len(out.getcolors(256)) <= 256


def test_tiff_uses_deflate(out_dir):
    path = out_dir / "deflate.tiff"
    encode(gradient(32, 32), str(path))
    with Image.open(path) as out:
        assert out.info["compression"] == "tiff_adobe_deflate"


def test_bmp_is_uncompressed(out_dir):
    path = out_dir / "plain.bmp"
    encode(gradient(32, 32), str(path))
    with Image.open(path) as out:
        assert out.info.get("compression", 0) == 0


def test_unwritable_destination(tmp_path):
    with pytest.raises(OutputError):
        encode(gradient(8, 8), str(tmp_path / "missing" / "out.png"))


def test_failed_encode_leaves_no_partial_file(out_dir, monkeypatch):
    monkeypatch.setitem(encoders.ENCODERS, ".png", lambda img, opts: (img, "NO-SUCH-FORMAT", {}))
    path = out_dir / "broken.png"
    with pytest.raises(OutputError):
        encode(gradient(8, 8), str(path))
    assert not path.exists()


@pytest.mark.parametrize("path,expected", [("a.png", True), ("a.PnG", True), ("a.gif", False), ("a.jpg", False), ("png", False)])
def test_preserves_transparency(path, expected):
    assert preserves_transparency(path) is expected
