# image_resize/pipeline.py
from __future__ import annotations
import logging
from typing import Callable, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from .config import Job, MAX_FILE_SIZE, PIXEL_LIMIT
from .dimensions import ConstraintSet, new_constraints, resolve
from .encoders import EncodeOptions, encode, preserves_transparency
from .errors import InputError, ResourceLimitError
from .image_processing import crop_square, flatten, is_opaque, resize
from .metadata import ORIENTATION_FORMATS, MetadataTask, OrientationDirective
from .streams import DuplicatingReader


def open_header(reader: DuplicatingReader, name: str) -> Image.Image:
    """Identify the container and native size; Pillow reads only the header here."""
    try:
        img = Image.open(reader)
    except Image.DecompressionBombError as e:
        raise ResourceLimitError(f"{name}: {e}") from e
    except UnidentifiedImageError as e:
        raise InputError(f"{name}: unrecognized image format") from e
    except (OSError, SyntaxError, ValueError) as e:
        raise InputError(f"{name}: cannot read image header: {e}") from e
    w, h = img.size
    if w * h > PIXEL_LIMIT:
        raise ResourceLimitError(f"image dimensions {w}x{h} exceeds limit")
    logging.info("Input %s: %s %dx%d (%s)", name, img.format, w, h, img.mode)
    return img


def decode(img: Image.Image, name: str) -> None:
    # ResourceLimitError from the capped reader passes through untouched
    try:
        img.load()
    except (OSError, EOFError, SyntaxError, ValueError) as e:
        raise InputError(f"{name}: cannot decode image: {e}") from e


def palette_size(img: Image.Image) -> Optional[int]:
    """Number of colours in a paletted image's palette, None otherwise."""
    if img.mode != "P":
        return None
    palette = img.getpalette()
    if not palette:
        return None
    return len(palette) // 3


def plan_orientation(
    task: Optional[MetadataTask],
    constraints: ConstraintSet,
    native: Tuple[int, int],
    target: Tuple[int, int],
) -> Tuple[Optional[OrientationDirective], ConstraintSet, Tuple[int, int]]:
    """Consult the metadata task once; swap constraints and re-resolve if needed."""
    if task is None:
        return None, constraints, target
    directive = task.poll()
    if directive is not None and directive.swap:
        constraints = constraints.swapped()
        target = resolve(constraints, *native)
        logging.info("Orientation swaps width/height; target now %dx%d", *target)
    return directive, constraints, target


def do(job: Job, task_factory: Callable[[], MetadataTask] = MetadataTask) -> None:
    """
    Run one resize job end to end: header, resolve, decode (racing the
    orientation extractor), orientation swap, square crop, resize,
    flatten, rotate, encode.

    Raises:
        ImageResizeError subclasses; see errors.py.
    """
    constraints = new_constraints(job.width, job.height, job.max_width, job.max_height)
    try:
        fh = open(job.input_path, "rb")
    except OSError as e:
        raise InputError(f"cannot open {job.input_path}: {e.strerror or e}") from e

    with fh:
        reader = DuplicatingReader(fh, MAX_FILE_SIZE)
        img = open_header(reader, job.input_path)
        native = img.size
        target = resolve(constraints, *native)
        logging.info("Initial target size %dx%d", *target)

        task = None
        if img.format in ORIENTATION_FORMATS:
            task = task_factory().start()
        reader.attach(task.sink if task else None)
        try:
            decode(img, job.input_path)
        finally:
            if task is not None:
                task.close()
        logging.debug("Decoded %d bytes", reader.consumed)

    directive, constraints, target = plan_orientation(task, constraints, native, target)
    source_palette = palette_size(img)

    current = img
    src_w, src_h = native
    if job.square:
        current = crop_square(current)
        src_w, src_h = current.size
        target = resolve(constraints, src_w, src_h)
        logging.info("Square crop to %dx%d; target now %dx%d", src_w, src_h, *target)

    width, height = target
    if constraints.max_bounded and width >= src_w and height >= src_h:
        logging.info("Source %dx%d already fits %dx%d; not resampling", src_w, src_h, width, height)
    else:
        current = resize(current, target)

    if not preserves_transparency(job.output_path) and not job.nofill and not is_opaque(current):
        logging.info("Flattening transparency onto white")
        current = flatten(current)

    if directive is not None:
        current = directive.apply(current)
        logging.info("Rotated %d degrees", directive.angle)

    encode(current, job.output_path, EncodeOptions(quality=job.quality, palette_size=source_palette))
