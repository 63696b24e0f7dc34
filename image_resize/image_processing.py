# image_resize/image_processing.py
from __future__ import annotations
import logging
from typing import Tuple

from PIL import Image

from .errors import CropError

# modes Pillow resamples directly with its fixed-point Lanczos kernel
LANCZOS_MODES = frozenset({"RGB", "YCbCr", "RGBA", "L"})
ALPHA_MODES = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})


def resize(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """
    Resample `image` to exactly `size`, returning a new image.
    Lanczos (3 lobes) for the common 8-bit modes; anything else is
    normalized to RGBA and resampled with bicubic (Catmull-Rom).
    """
    if image.mode in LANCZOS_MODES:
        logging.debug("Lanczos resize %s %s -> %s", image.mode, image.size, size)
        return image.resize(size, resample=Image.Resampling.LANCZOS)
    logging.debug("Catmull-Rom resize %s %s -> %s via RGBA", image.mode, image.size, size)
    return image.convert("RGBA").resize(size, resample=Image.Resampling.BICUBIC)


def is_opaque(image: Image.Image) -> bool:
    if image.mode in ALPHA_MODES:
        return image.getchannel("A").getextrema()[0] == 255
    if "transparency" in image.info:
        return image.convert("RGBA").getchannel("A").getextrema()[0] == 255
    return True


def flatten(image: Image.Image) -> Image.Image:
    """Composite `image` over opaque white and return the new RGB image."""
    background = Image.new("RGBA", image.size, (255, 255, 255, 255))
    background.alpha_composite(image.convert("RGBA"))
    return background.convert("RGB")


def crop_square(image: Image.Image) -> Image.Image:
    """Centered square crop with side min(width, height)."""
    crop = getattr(image, "crop", None)
    if not callable(crop):
        raise CropError(f"cannot crop image of type {type(image).__name__}")
    w, h = image.size
    side = min(w, h)
    left = (w - side) // 2
    top = (h - side) // 2
    try:
        return crop((left, top, left + side, top + side))
    except (ValueError, OSError) as e:
        raise CropError(f"cannot crop {w}x{h} image to {side}x{side}: {e}") from e
