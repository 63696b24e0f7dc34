# image_resize/utils.py
from __future__ import annotations
import logging

VERSION = "1.0.0"

def setup_logging(verbosity: str = "warning"):
    """Configure global logging level and format; everything goes to stderr."""
    level = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }.get(verbosity.lower(), logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
