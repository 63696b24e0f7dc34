# image_resize/encoders.py
"""
Output encoding, selected by the lower-cased extension of the output path.

    .gif          palette (source palette size, or adaptive 256 colours)
    .png          lossless, maximum compression
    .tiff / .tif  deflate with horizontal predictor
    .bmp          uncompressed
    anything else JPEG at the requested quality
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from PIL import Image

from .config import DEFAULT_QUALITY, normalize_quality
from .errors import OutputError

TIFF_PREDICTOR_TAG = 317
HORIZONTAL_DIFFERENCING = 2


@dataclass(frozen=True)
class EncodeOptions:
    quality: int = DEFAULT_QUALITY
    palette_size: Optional[int] = None  # colours in the source palette, if it had one


def _storable(image: Image.Image, modes: Tuple[str, ...]) -> Image.Image:
    if image.mode in modes:
        return image
    has_alpha = "A" in image.mode or "transparency" in image.info
    return image.convert("RGBA" if has_alpha and "RGBA" in modes else "RGB")


def _gif(image: Image.Image, options: EncodeOptions) -> Tuple[Image.Image, str, Dict[str, Any]]:
    if image.mode == "P":
        return image, "GIF", {}
    colors = max(1, min(options.palette_size or 256, 256))
    if image.mode not in ("L", "RGB", "RGBA"):
        image = image.convert("RGBA")
    return image.quantize(colors=colors), "GIF", {}


def _png(image: Image.Image, options: EncodeOptions):
    image = _storable(image, ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"))
    return image, "PNG", {"optimize": True, "compress_level": 9}


def _tiff(image: Image.Image, options: EncodeOptions):
    image = _storable(image, ("L", "LA", "P", "RGB", "RGBA", "CMYK"))
    params = {
        "compression": "tiff_adobe_deflate",
        "tiffinfo": {TIFF_PREDICTOR_TAG: HORIZONTAL_DIFFERENCING},
    }
    return image, "TIFF", params


def _bmp(image: Image.Image, options: EncodeOptions):
    return _storable(image, ("1", "L", "P", "RGB", "RGBA")), "BMP", {}


def _jpeg(image: Image.Image, options: EncodeOptions):
    # alpha is dropped, not composited; flattening happens earlier if wanted
    image = _storable(image, ("L", "RGB", "CMYK"))
    return image, "JPEG", {"quality": normalize_quality(options.quality)}


ENCODERS: Dict[str, Callable[[Image.Image, EncodeOptions], Tuple[Image.Image, str, Dict[str, Any]]]] = {
    ".gif": _gif,
    ".png": _png,
    ".tiff": _tiff,
    ".tif": _tiff,
    ".bmp": _bmp,
}


def preserves_transparency(path: str) -> bool:
    """True for containers that keep alpha losslessly, where flattening is skipped."""
    return os.path.splitext(path)[1].lower() == ".png"


def encode(image: Image.Image, path: str, options: Optional[EncodeOptions] = None) -> None:
    """Write `image` to `path`; raises OutputError on any create/encode/flush failure."""
    options = options or EncodeOptions()
    ext = os.path.splitext(path)[1].lower()
    prepare = ENCODERS.get(ext, _jpeg)
    created = False
    try:
        prepared, fmt, params = prepare(image, options)
        logging.info("Encoding %s %dx%d (%s) to %s", fmt, prepared.width, prepared.height, prepared.mode, path)
        with open(path, "wb") as fh:
            created = True
            prepared.save(fh, format=fmt, **params)
    except (OSError, ValueError, KeyError) as e:
        if created:
            _remove_partial(path)
        raise OutputError(f"cannot write {path}: {e}") from e


def _remove_partial(path: str) -> None:
    try:
        os.remove(path)
    except OSError as e:
        logging.warning("Could not remove partial output %s (%s)", path, e)
