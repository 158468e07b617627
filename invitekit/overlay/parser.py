from __future__ import annotations

import html
import logging
import math
import re

from invitekit.constants import RESERVED_GROUP_IDS
from invitekit.models import CanvasSize, Field, OverlayInfo
from invitekit.naming import id_to_label

LOGGER = logging.getLogger(__name__)

VIEW_BOX_RE = re.compile(r"""viewBox=["']([^"']+)["']""")
GROUP_TAG_RE = re.compile(r"<g\b([^>]*)>")
GROUP_ID_RE = re.compile(r'\bid="([^"]+)"')
FIRST_TSPAN_RE = re.compile(r"<tspan[^>]*>([^<]*)<")
_LAYER_ID_RE = re.compile(r"^layer", re.IGNORECASE)
_VIEW_BOX_SPLIT_RE = re.compile(r"[\s,]+")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def split_view_box(value: str) -> list[str]:
    return _VIEW_BOX_SPLIT_RE.split(value.strip())


def parse_view_box(content: str) -> CanvasSize:
    match = VIEW_BOX_RE.search(content)
    if not match:
        return CanvasSize()
    parts = split_view_box(match.group(1))
    if len(parts) < 4:
        return CanvasSize()
    try:
        width = float(parts[2])
        height = float(parts[3])
    except ValueError:
        LOGGER.debug("unparsable viewBox %r, using default canvas", match.group(1))
        return CanvasSize()
    if not (math.isfinite(width) and math.isfinite(height)):
        return CanvasSize()
    return CanvasSize(round_half_up(width), round_half_up(height))


def is_reserved_group_id(group_id: str) -> bool:
    return group_id.lower() in RESERVED_GROUP_IDS or bool(_LAYER_ID_RE.match(group_id))


def iter_group_ids(content: str):
    """Yield ``(group_id, end_of_opening_tag)`` for every ``<g id="...">`` in source order."""
    for match in GROUP_TAG_RE.finditer(content):
        id_match = GROUP_ID_RE.search(match.group(1))
        if id_match:
            yield id_match.group(1), match.end()


def discover_fields(content: str) -> list[Field]:
    fields: list[Field] = []
    seen: set[str] = set()
    for group_id, tag_end in iter_group_ids(content):
        if group_id in seen:
            continue
        if is_reserved_group_id(group_id):
            continue
        seen.add(group_id)

        # First run after the opening tag, scanning forward to end of document
        tspan = FIRST_TSPAN_RE.search(content, tag_end)
        placeholder = html.unescape(tspan.group(1)).strip() if tspan else ""
        fields.append(Field(id=group_id, label=id_to_label(group_id), placeholder=placeholder, rtl=True))
    return fields


def parse_overlay(content: str) -> OverlayInfo:
    fields = discover_fields(content)
    return OverlayInfo(
        canvas=parse_view_box(content),
        fields=tuple(fields) if fields else None,
    )
