from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from invitekit.overlay.parser import round_half_up


@dataclass(slots=True, frozen=True)
class CanvasPreset:
    key: str
    label: str
    description: str
    width: int
    height: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "description": self.description,
            "width": self.width,
            "height": self.height,
        }


CANVAS_SIZES: tuple[CanvasPreset, ...] = (
    CanvasPreset("portrait", "Portrait", "Classic invitation format", 450, 800),
    CanvasPreset("square", "Square", "Instagram post · 1:1", 600, 600),
    CanvasPreset("a4", "A4 / Letter", "Print-ready format", 595, 842),
    CanvasPreset("landscape", "Landscape", "Event banner · 16:9", 800, 450),
    CanvasPreset("story", "Story / Reel", "Instagram & TikTok · 9:16", 540, 960),
)

DEFAULT_SIZE = CANVAS_SIZES[0]


def get_size_by_key(key: str) -> CanvasPreset:
    for preset in CANVAS_SIZES:
        if preset.key == key:
            return preset
    return DEFAULT_SIZE


def default_positions(width: int, height: int) -> dict[str, int]:
    """Anchor points for the fixed title/name/date layout used by templates without an overlay."""
    center_x = round_half_up(width / 2)
    return {
        "titleX": center_x,
        "titleY": round_half_up(height * 0.28),
        "nameX": center_x,
        "nameY": round_half_up(height * 0.40),
        "dateX": center_x,
        "dateY": round_half_up(height * 0.52),
    }
