# image_resize/metadata.py
"""
Best-effort EXIF orientation extraction racing the main decode.

Exports:
    MetadataTask        background extractor fed through a PipeBuffer
    OrientationDirective, directive_for
    read_orientation    default extractor (Pillow EXIF parser)
    ORIENTATION_FORMATS Pillow format names the task is started for

The pipeline polls the task exactly once, without waiting, after the decode
has finished. A task that is not done by then is simply ignored; it keeps
draining its input in the background so the writer never blocks.
"""

from __future__ import annotations
import logging
import queue
import threading
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from PIL import ExifTags, Image

from .streams import PipeBuffer

ORIENTATION_FORMATS = frozenset({"JPEG", "MPO"})

Extractor = Callable[[BinaryIO], Optional[int]]


@dataclass(frozen=True)
class OrientationDirective:
    angle: int  # counter-clockwise degrees
    swap: bool

    def apply(self, image: Image.Image) -> Image.Image:
        """Return a new image rotated by `angle`."""
        return image.transpose(_TRANSPOSE[self.angle])


_TRANSPOSE = {
    90: Image.Transpose.ROTATE_90,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_270,
}

_DIRECTIVES = {
    3: OrientationDirective(angle=180, swap=False),
    6: OrientationDirective(angle=270, swap=True),
    8: OrientationDirective(angle=90, swap=True),
}


def directive_for(orientation) -> Optional[OrientationDirective]:
    """Map an EXIF orientation value to a directive; mirrored and unknown values map to None."""
    if isinstance(orientation, bool) or not isinstance(orientation, int):
        return None
    return _DIRECTIVES.get(orientation)


def read_orientation(stream: BinaryIO) -> Optional[int]:
    # Image.open stops after the JPEG header, which is where APP1/EXIF lives
    with Image.open(stream) as im:
        return im.getexif().get(ExifTags.Base.Orientation)


@dataclass(frozen=True)
class _Outcome:
    orientation: Optional[int] = None
    error: Optional[BaseException] = None


class MetadataTask:
    """Runs `extractor` on a daemon thread over the bytes written to `sink`."""

    def __init__(self, extractor: Extractor = read_orientation) -> None:
        self._extractor = extractor
        self._stream = PipeBuffer()
        self._result: "queue.Queue[_Outcome]" = queue.Queue(maxsize=1)
        self._thread = threading.Thread(target=self._run, name="orientation-extractor", daemon=True)

    @property
    def sink(self) -> PipeBuffer:
        return self._stream

    def start(self) -> "MetadataTask":
        self._thread.start()
        return self

    def _run(self) -> None:
        try:
            outcome = _Outcome(orientation=self._extractor(self._stream))
        except Exception as exc:
            logging.debug("Orientation extraction failed: %s", exc)
            outcome = _Outcome(error=exc)
        self._result.put_nowait(outcome)
        self._stream.drain()

    def close(self) -> None:
        """Signal that the main decoder will not produce any more bytes."""
        self._stream.close_writer()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Join the worker; True when it has finished."""
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def poll(self) -> Optional[OrientationDirective]:
        """Single non-blocking look at the result slot."""
        try:
            outcome = self._result.get_nowait()
        except queue.Empty:
            logging.warning("Orientation metadata not ready after decode; skipping orientation correction")
            return None
        if outcome.error is not None:
            return None
        directive = directive_for(outcome.orientation)
        logging.debug("EXIF orientation %r -> %s", outcome.orientation, directive)
        return directive
