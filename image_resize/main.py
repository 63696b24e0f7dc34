# image_resize/main.py
from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from .utils import setup_logging, VERSION
from .config import load_config, build_job
from .pipeline import do


class ArgumentParser(argparse.ArgumentParser):
    """Reports bad flags as a ValueError instead of printing usage and exiting 2."""

    def error(self, message):
        raise ValueError(f"{self.prog}: {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(prog="image-resize", description="Resize (re-scale) images of different formats")
    parser.add_argument("-width", "--width", type=int, default=None, help="width to enforce")
    parser.add_argument("-height", "--height", type=int, default=None, help="height to enforce")
    parser.add_argument("-maxwidth", "--maxwidth", type=int, default=None, help="max. allowed width")
    parser.add_argument("-maxheight", "--maxheight", type=int, default=None, help="max. allowed height")
    parser.add_argument("-input", "--input", default=None, help="input file")
    parser.add_argument("-output", "--output", default=None, help="output file (format chosen by extension)")
    parser.add_argument("-square", "--square", action="store_true", default=None, help="crop to a centered square before resizing")
    parser.add_argument("-nofill", "--nofill", action="store_true", default=None, help="do not flatten transparency onto white")
    parser.add_argument("-q", "--q", type=int, default=None, help="jpeg quality (1-100)")
    parser.add_argument("--config", "-c", default=None, help="Path to a JSON file with default flag values")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--log", default="warning", help="Set log level: debug, info, warning, error")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except ValueError as e:
        setup_logging()
        logging.error("%s", e)
        return 1

    if args.version:
        print(f"image-resize version {VERSION}")
        return 0

    setup_logging(args.log)

    cli = {k: getattr(args, k) for k in ("width", "height", "maxwidth", "maxheight", "input", "output", "square", "nofill", "q")}
    try:
        file_cfg = load_config(args.config) if args.config else None
        job = build_job(cli, file_cfg)
        do(job)
    except Exception as e:
        logging.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
