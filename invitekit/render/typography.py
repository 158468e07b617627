from __future__ import annotations

import logging
import os
import platform
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable

from PIL import Image, ImageDraw, ImageFont

LOGGER = logging.getLogger(__name__)

_FONT_FILE_SUFFIXES = {".ttf", ".ttc", ".otf", ".otc"}
_FONT_KEY_STRIP_RE = re.compile(r"[\s_\-]+")

_measure_draw: ImageDraw.ImageDraw | None = None


def _system_font_candidates() -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        return [
            Path(r"C:\Windows\Fonts\arial.ttf"),
            Path(r"C:\Windows\Fonts\david.ttf"),
            Path(r"C:\Windows\Fonts\segoeui.ttf"),
        ]
    if "darwin" in system:
        return [
            Path("/System/Library/Fonts/Supplemental/Arial.ttf"),
            Path("/System/Library/Fonts/SFHebrew.ttf"),
            Path("/Library/Fonts/Arial Unicode.ttf"),
        ]
    return [
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/truetype/noto/NotoSansHebrew-Regular.ttf"),
        Path("/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf"),
    ]


def _system_font_directories() -> list[Path]:
    system = platform.system().lower()
    roots: list[Path] = []
    if "windows" in system:
        windows_dir = Path(os.environ.get("WINDIR", r"C:\Windows"))
        roots.append(windows_dir / "Fonts")
        local_app_data = os.environ.get("LOCALAPPDATA")
        if local_app_data:
            roots.append(Path(local_app_data) / "Microsoft" / "Windows" / "Fonts")
    elif "darwin" in system:
        roots.extend(
            [
                Path("/System/Library/Fonts"),
                Path("/Library/Fonts"),
                Path.home() / "Library" / "Fonts",
            ]
        )
    else:
        roots.extend(
            [
                Path("/usr/share/fonts"),
                Path("/usr/local/share/fonts"),
                Path.home() / ".fonts",
                Path.home() / ".local" / "share" / "fonts",
            ]
        )
    return roots


def _walk_font_files(roots: Iterable[Path]) -> list[Path]:
    system = platform.system().lower()
    available: list[Path] = []
    seen: set[str] = set()
    for root in roots:
        try:
            if not root.exists() or not root.is_dir():
                continue
        except OSError:
            continue

        for dir_path, _dir_names, file_names in os.walk(root, onerror=lambda _err: None):
            for file_name in file_names:
                if Path(file_name).suffix.lower() not in _FONT_FILE_SUFFIXES:
                    continue
                candidate = Path(dir_path) / file_name
                key = str(candidate)
                dedupe_key = key.lower() if "windows" in system else key
                if dedupe_key in seen:
                    continue
                seen.add(dedupe_key)
                available.append(candidate)

    available.sort(key=lambda path: (path.stem.lower(), path.name.lower(), str(path).lower()))
    return available


@lru_cache(maxsize=1)
def list_available_font_paths() -> list[Path]:
    return _walk_font_files(_system_font_directories())


@lru_cache(maxsize=8)
def _list_extra_font_paths(extra_dirs: tuple[str, ...]) -> list[Path]:
    return _walk_font_files(Path(item) for item in extra_dirs)


def _font_key(name: str) -> str:
    return _FONT_KEY_STRIP_RE.sub("", name).lower()


def primary_family(font_family: str) -> str:
    """First family of a CSS ``font-family`` list, unquoted."""
    return font_family.replace('"', "").replace("'", "").split(",")[0].strip()


def resolve_font_path(font_family: str, font_dirs: Iterable[str | Path] = ()) -> Path | None:
    wanted = _font_key(primary_family(font_family))
    if not wanted:
        return None
    extra = tuple(str(item) for item in font_dirs)
    pools = [_list_extra_font_paths(extra)] if extra else []
    pools.append(list_available_font_paths())
    for pool in pools:
        # Exact stem first, then "Family-Regular" style stems
        for path in pool:
            if _font_key(path.stem) == wanted:
                return path
        for path in pool:
            key = _font_key(path.stem)
            if key.startswith(wanted) and key[len(wanted):] in {"regular", "book", "roman"}:
                return path
    return None


def load_font(font_path: Path | None, size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates: list[Path] = []
    if font_path:
        candidates.append(font_path)
    candidates.extend(_system_font_candidates())
    for candidate in candidates:
        if candidate.exists():
            try:
                return _truetype(str(candidate), size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


@lru_cache(maxsize=64)
def _truetype(path: str, size: float) -> ImageFont.FreeTypeFont:
    return ImageFont.truetype(path, size=size)


def _measure_surface() -> ImageDraw.ImageDraw:
    global _measure_draw
    if _measure_draw is None:
        _measure_draw = ImageDraw.Draw(Image.new("L", (1, 1), color=0))
    return _measure_draw


def measure_text_width(
    text: str,
    font_family: str,
    font_size: float,
    font_dirs: Iterable[str | Path] = (),
    fallback_font: Path | None = None,
) -> float:
    """Advance width of ``text`` in user units (one unit per pixel at ``font_size``)."""
    if not text or font_size <= 0:
        return 0.0
    try:
        font = load_font(resolve_font_path(font_family, font_dirs) or fallback_font, font_size)
        return float(_measure_surface().textlength(text, font=font))
    except Exception as exc:
        LOGGER.debug("text measurement failed for %r (%s): %s", text, font_family, exc)
        return 0.0


def make_measure(font_dirs: Iterable[str | Path] = (), fallback_font: Path | None = None):
    """Bind configured font locations into a ``(text, family, size) -> width`` callable."""
    dirs = tuple(str(item) for item in font_dirs)

    def _measure(text: str, font_family: str, font_size: float) -> float:
        return measure_text_width(text, font_family, font_size, dirs, fallback_font)

    return _measure
