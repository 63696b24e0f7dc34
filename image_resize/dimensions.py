# image_resize/dimensions.py
"""
Target-size resolution.

A ConstraintSet is either *max-bounded* (fit inside a box, never upscale) or
*exact* (resize to the given size). Max-bounded wins when both kinds of fields
are set. `resolve` is pure: it is re-run whenever the native size or the
constraints change (after an orientation swap, after a square crop).
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Tuple

from .config import MAX_AXIS, PIXEL_LIMIT
from .errors import ConstraintError, ResourceLimitError


@dataclass(frozen=True)
class ConstraintSet:
    width: int = 0
    height: int = 0
    max_width: int = 0
    max_height: int = 0

    @property
    def max_bounded(self) -> bool:
        return self.max_width > 0 or self.max_height > 0

    @property
    def exact(self) -> bool:
        return self.width > 0 or self.height > 0

    def swapped(self) -> "ConstraintSet":
        """Return a copy with width/height and max_width/max_height exchanged."""
        return replace(
            self,
            width=self.height,
            height=self.width,
            max_width=self.max_height,
            max_height=self.max_width,
        )

    def validate(self) -> None:
        fields = (self.width, self.height, self.max_width, self.max_height)
        if not any(fields):
            raise ConstraintError("no valid dimensions specified")
        if any(v < 0 for v in fields):
            raise ConstraintError(f"dimensions must not be negative: {self}")
        if any(v > PIXEL_LIMIT for v in fields) or self.width * self.height > PIXEL_LIMIT:
            raise ConstraintError("destination size exceeds limit")


def new_constraints(width: int = 0, height: int = 0, max_width: int = 0, max_height: int = 0) -> ConstraintSet:
    """Build a validated ConstraintSet; raises ConstraintError."""
    constraints = ConstraintSet(width=width, height=height, max_width=max_width, max_height=max_height)
    constraints.validate()
    return constraints


def _fill_missing(w: int, h: int, orig_width: int, orig_height: int) -> Tuple[int, int]:
    # derive an absent side from the other one using the source aspect ratio
    if w == 0:
        w = orig_width * h // orig_height
    if h == 0:
        h = orig_height * w // orig_width
    return w, h


def resolve(constraints: ConstraintSet, orig_width: int, orig_height: int) -> Tuple[int, int]:
    """Compute the target (width, height) for a source of the given size.

    Raises:
        ConstraintError: invalid constraint set or zero source dimension.
        ResourceLimitError: the resulting size exceeds the pixel budget or
            either axis reaches MAX_AXIS.
    """
    constraints.validate()
    if orig_width <= 0 or orig_height <= 0:
        raise ConstraintError("invalid source dimensions")

    if constraints.max_bounded:
        w, h = _fill_missing(constraints.max_width, constraints.max_height, orig_width, orig_height)
        if orig_width <= w and orig_height <= h:
            return orig_width, orig_height  # already fits
        if constraints.max_width > 0 and constraints.max_height > 0:
            # free-aspect box: shrink the side that would overflow the source ratio
            if orig_width / orig_height > w / h:
                h = orig_height * w // orig_width
            else:
                w = orig_width * h // orig_height
    elif constraints.exact:
        w, h = _fill_missing(constraints.width, constraints.height, orig_width, orig_height)
    else:
        raise ConstraintError(f"invalid transform {constraints}")

    if w * h > PIXEL_LIMIT or w >= MAX_AXIS or h >= MAX_AXIS:
        raise ResourceLimitError("destination size exceeds limit")
    if w <= 0 or h <= 0:
        raise ConstraintError(f"destination size {w}x{h} is empty for source {orig_width}x{orig_height}")
    return w, h
