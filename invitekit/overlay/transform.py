from __future__ import annotations

import math
import re

# Leading numeric prefix, read the way browsers read attribute numbers ("24px" -> 24)
_NUMBER_PREFIX_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_ROTATE_RE = re.compile(r"rotate\(\s*([\d.+-]+)")
_SCALE_RE = re.compile(r"scale\(\s*([\d.+-]+)")
_TRANSLATE_RE = re.compile(r"translate\(\s*([\d.+-]+)")


def parse_number(value: str | None) -> float | None:
    if not value:
        return None
    match = _NUMBER_PREFIX_RE.match(value)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def _first_argument(pattern: re.Pattern[str], transform: str) -> float | None:
    match = pattern.search(transform)
    if not match:
        return None
    return parse_number(match.group(1))


def rotation_degrees(transform: str) -> float:
    angle = _first_argument(_ROTATE_RE, transform)
    return abs(angle) if angle is not None else 0.0


def scale_x(transform: str) -> float:
    factor = _first_argument(_SCALE_RE, transform)
    return factor if factor is not None else 1.0


def translate_x(transform: str) -> float:
    offset = _first_argument(_TRANSLATE_RE, transform)
    return offset if offset is not None else 0.0


def format_coordinate(value: float) -> str:
    """Round to one decimal (half up) and drop a trailing ``.0``."""
    if not math.isfinite(value):
        return "0"
    tenths = math.floor(value * 10 + 0.5)
    rounded = tenths / 10
    if rounded == int(rounded):
        return str(int(rounded))
    return str(rounded)
