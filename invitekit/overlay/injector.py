from __future__ import annotations

import io
import logging
import xml.etree.ElementTree as ET
from typing import Callable, Iterable, Iterator

from invitekit.constants import (
    DEFAULT_FONT_FAMILY,
    DEFAULT_FONT_SIZE,
    ROTATION_THRESHOLD_DEG,
    SVG_NS,
)
from invitekit.models import Field, FieldValues
from invitekit.overlay.parser import split_view_box
from invitekit.overlay.transform import (
    format_coordinate,
    parse_number,
    rotation_degrees,
    scale_x,
    translate_x,
)
from invitekit.render.typography import measure_text_width

LOGGER = logging.getLogger(__name__)

# (text, font_family, font_size) -> width in user units
MeasureFunc = Callable[[str, str, float], float]

ET.register_namespace("", SVG_NS)


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _iter_local(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Descendants (excluding ``element`` itself) with the given local tag name, in document order."""
    for node in element.iter():
        if node is not element and _local_name(node.tag) == name:
            yield node


def _first_local(element: ET.Element, name: str) -> ET.Element | None:
    return next(_iter_local(element, name), None)


def _find_by_id(root: ET.Element, element_id: str) -> ET.Element | None:
    for node in root.iter():
        if node.get("id") == element_id:
            return node
    return None


def _source_prefixes(svg_text: str) -> dict[str, str]:
    """Namespace URI -> prefix as declared in the source, first declaration wins."""
    prefixes: dict[str, str] = {}
    for _event, (prefix, uri) in ET.iterparse(io.StringIO(svg_text), events=("start-ns",)):
        # SVG stays the default namespace so inline markup keeps unprefixed tags
        if not prefix or prefix == "xml" or uri == SVG_NS:
            continue
        if uri in prefixes or prefix in prefixes.values():
            continue
        prefixes[uri] = prefix
    return prefixes


def _qualify(name: str, prefixes: dict[str, str]) -> str:
    if name[:1] != "{":
        return name
    uri, local = name[1:].split("}", 1)
    prefix = prefixes.get(uri)
    return f"{prefix}:{local}" if prefix else name


def _apply_source_prefixes(root: ET.Element, prefixes: dict[str, str]) -> None:
    # Written as literal qualified names so serialisation never consults the shared prefix registry
    if not prefixes:
        return
    for node in root.iter():
        if isinstance(node.tag, str):
            node.tag = _qualify(node.tag, prefixes)
        if any(key[:1] == "{" for key in node.attrib):
            items = [(_qualify(key, prefixes), value) for key, value in node.attrib.items()]
            node.attrib.clear()
            node.attrib.update(items)
    for uri, prefix in prefixes.items():
        root.set(f"xmlns:{prefix}", uri)


def _parse(svg_text: str) -> ET.Element:
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    parser.feed(svg_text)
    return parser.close()


def _view_box_width(root: ET.Element) -> float:
    parts = split_view_box(root.get("viewBox") or "")
    if len(parts) < 3:
        return 0.0
    return parse_number(parts[2]) or 0.0


def _strip_group_markers(root: ET.Element) -> None:
    for node in root.iter():
        if _local_name(node.tag) != "g":
            continue
        group_id = node.get("id")
        if group_id and "*" in group_id:
            node.set("id", group_id.replace("*", ""))


def _set_run_text(tspan: ET.Element, value: str) -> None:
    for child in list(tspan):
        tspan.remove(child)
    tspan.text = value


def _recenter(
    text_el: ET.Element,
    tspan: ET.Element,
    original_text: str,
    svg_width: float,
    measure: MeasureFunc,
) -> None:
    transform = text_el.get("transform") or ""
    rotation = rotation_degrees(transform)
    sx = scale_x(transform)

    text_el.set("text-anchor", "middle")

    if rotation < ROTATION_THRESHOLD_DEG:
        # Level text: centre on the card's horizontal midpoint, in the element's local units
        tx = translate_x(transform)
        local_center_x = (svg_width / 2 - tx) / sx if sx > 0 else svg_width / 2
    else:
        # Rotated text was authored starting at local x=0; keep the centre of the original run
        font_family = text_el.get("font-family") or DEFAULT_FONT_FAMILY
        font_size = parse_number(text_el.get("font-size"))
        if font_size is None:
            font_size = DEFAULT_FONT_SIZE
        local_center_x = measure(original_text, font_family, font_size) / 2

    tspan.set("x", format_coordinate(local_center_x))


def inject_field_values(
    svg_text: str,
    fields: Iterable[Field],
    values: FieldValues,
    measure: MeasureFunc = measure_text_width,
) -> str:
    """Return ``svg_text`` with each field's first text run replaced by ``values[field.id]``.

    Fields without a key in ``values`` keep their authored text. A field whose
    group or run is missing is skipped. Single-run fields are re-centred so
    the replacement sits where the authored sample text sat. The root is
    resized to fill its container. Unparsable input is returned unchanged.
    """
    try:
        root = _parse(svg_text)
        prefixes = _source_prefixes(svg_text)
    except ET.ParseError as exc:
        LOGGER.warning("overlay is not well-formed, returning it unmodified: %s", exc)
        return svg_text

    root.set("width", "100%")
    root.set("height", "100%")
    _strip_group_markers(root)
    svg_width = _view_box_width(root)

    for field in fields:
        # Catalog ids may still carry the "*" marker; the tree no longer does
        group = _find_by_id(root, field.id.replace("*", ""))
        if group is None:
            LOGGER.debug("field %r has no group in overlay", field.id)
            continue
        text_el = _first_local(group, "text")
        tspan = _first_local(text_el, "tspan") if text_el is not None else None
        if text_el is None or tspan is None:
            LOGGER.debug("field %r has no text run", field.id)
            continue
        if field.id not in values:
            continue

        value = values[field.id]
        original_text = "".join(tspan.itertext()).strip()
        _set_run_text(tspan, "" if value is None else str(value))

        run_count = sum(1 for _ in _iter_local(text_el, "tspan"))
        if svg_width <= 0 or run_count > 1:
            continue
        _recenter(text_el, tspan, original_text, svg_width, measure)

    _apply_source_prefixes(root, prefixes)
    return ET.tostring(root, encoding="unicode")
