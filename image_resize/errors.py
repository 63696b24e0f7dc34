# image_resize/errors.py
from __future__ import annotations


class ImageResizeError(Exception):
    """Base class for every failure that aborts a resize job."""

    def __init__(self, message: str = "image resize failed"):
        self.message: str = message
        super().__init__(self.message)

    def __str__(self):
        return self.message


class ConstraintError(ImageResizeError):
    """Missing, contradictory or over-limit size constraints."""


class ResourceLimitError(ImageResizeError):
    """Native or resolved pixel count, or input byte count, exceeds a ceiling."""


class InputError(ImageResizeError):
    """The source cannot be opened or decoded."""


class CropError(ImageResizeError):
    """Square crop requested on an image without sub-region support."""


class OutputError(ImageResizeError):
    """The destination cannot be created, encoded or flushed."""
