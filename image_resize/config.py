# image_resize/config.py
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

PIXEL_LIMIT = 50 * 1000000
MAX_FILE_SIZE = 50 << 20
MAX_AXIS = 1 << 16
DEFAULT_QUALITY = 75

INT_KEYS = ("width", "height", "maxwidth", "maxheight", "q")
BOOL_KEYS = ("square", "nofill")
STR_KEYS = ("input", "output")


@dataclass(frozen=True)
class Job:
    input_path: str
    output_path: str
    width: int = 0
    height: int = 0
    max_width: int = 0
    max_height: int = 0
    quality: int = DEFAULT_QUALITY
    square: bool = False
    nofill: bool = False


def normalize_quality(q: int) -> int:
    """Out-of-range JPEG quality falls back to the library default."""
    if q < 1 or q > 100:
        return DEFAULT_QUALITY
    return q


def load_json_with_hint(path: str) -> Dict:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as e:
        hint = (
            "JSON parse error in %s at line %d column %d: %s. "
            "On Windows use forward slashes (/) or escaped backslashes (\\\\) in file paths."
            % (path, e.lineno, e.colno, e.msg)
        )
        raise ValueError(hint) from e


def load_config(path: str) -> Dict[str, Any]:
    """Read a JSON file whose keys mirror the command-line flag names."""
    raw = load_json_with_hint(path)
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    known = set(INT_KEYS) | set(BOOL_KEYS) | set(STR_KEYS)
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown config key(s): {', '.join(unknown)}")

    normalized: Dict[str, Any] = {}
    for k in INT_KEYS:
        if k in raw:
            v = raw[k]
            if isinstance(v, bool) or not isinstance(v, int):
                raise ValueError(f"Config key '{k}' must be an integer, got {v!r}")
            normalized[k] = v
    for k in BOOL_KEYS:
        if k in raw:
            if not isinstance(raw[k], bool):
                raise ValueError(f"Config key '{k}' must be true or false, got {raw[k]!r}")
            normalized[k] = raw[k]
    for k in STR_KEYS:
        if k in raw:
            if not isinstance(raw[k], str):
                raise ValueError(f"Config key '{k}' must be a string, got {raw[k]!r}")
            normalized[k] = raw[k]
    logging.debug("Loaded config %s: %s", path, normalized)
    return normalized


def build_job(cli: Dict[str, Any], file_cfg: Optional[Dict[str, Any]] = None) -> Job:
    """Merge config-file values with command-line values into a Job.

    Command-line values win whenever they were given (not None).
    """
    merged: Dict[str, Any] = dict(file_cfg or {})
    merged.update({k: v for k, v in cli.items() if v is not None})

    input_path = merged.get("input")
    if not input_path:
        raise ValueError("input file must be set")
    output_path = merged.get("output")
    if not output_path:
        raise ValueError("output file must be set")

    quality = normalize_quality(int(merged.get("q", DEFAULT_QUALITY)))
    if quality != merged.get("q", DEFAULT_QUALITY):
        logging.info("JPEG quality %s out of range; using %d", merged.get("q"), quality)

    return Job(
        input_path=input_path,
        output_path=output_path,
        width=int(merged.get("width", 0)),
        height=int(merged.get("height", 0)),
        max_width=int(merged.get("maxwidth", 0)),
        max_height=int(merged.get("maxheight", 0)),
        quality=quality,
        square=bool(merged.get("square", False)),
        nofill=bool(merged.get("nofill", False)),
    )
