from __future__ import annotations

import logging
from pathlib import Path

from invitekit.constants import DEFAULT_PUBLIC_PREFIX, OVERLAY_EXTENSION, RASTER_EXTENSIONS
from invitekit.models import CanvasSize, DiscoveryResult, Template
from invitekit.naming import folder_to_category, public_url, stem_to_name, template_id
from invitekit.overlay.parser import parse_overlay

LOGGER = logging.getLogger(__name__)


def is_raster(name: str) -> bool:
    return Path(name).suffix.lower() in RASTER_EXTENSIONS


def raster_stem(name: str) -> str:
    return name[: -len(Path(name).suffix)] if is_raster(name) else name


def find_overlay_name(file_names: list[str], stem: str) -> str | None:
    wanted = f"{stem}{OVERLAY_EXTENSION}".lower()
    for name in file_names:
        if name.lower() == wanted:
            return name
    return None


def list_category_dirs(root: Path) -> list[Path]:
    return sorted((entry for entry in root.iterdir() if entry.is_dir()), key=lambda entry: entry.name)


def _build_template(folder_path: Path, image_name: str, file_names: list[str], public_prefix: str) -> Template:
    folder = folder_path.name
    stem = raster_stem(image_name)
    template = Template(
        id=template_id(folder, stem),
        name=stem_to_name(stem),
        category=folder_to_category(folder),
        thumbnail_src=public_url(public_prefix, folder, image_name),
        canvas=CanvasSize(),
    )

    overlay_name = find_overlay_name(file_names, stem)
    if overlay_name is None:
        return template

    overlay_path = folder_path / overlay_name
    content = overlay_path.read_text(encoding="utf-8")
    info = parse_overlay(content)
    template.text_svg = public_url(public_prefix, folder, overlay_name)
    template.overlay_path = overlay_path
    template.fields = info.fields
    template.canvas = info.canvas
    return template


def discover_category(folder_path: Path, public_prefix: str = DEFAULT_PUBLIC_PREFIX) -> list[Template]:
    file_names = [entry.name for entry in folder_path.iterdir() if entry.is_file()]
    templates: list[Template] = []
    for image_name in sorted(name for name in file_names if is_raster(name)):
        try:
            templates.append(_build_template(folder_path, image_name, file_names, public_prefix))
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("skipping template %s/%s: %s", folder_path.name, image_name, exc)
    return templates


def discover_templates(root: Path, public_prefix: str = DEFAULT_PUBLIC_PREFIX) -> DiscoveryResult:
    """Build the template catalog from ``root/{category}/{stem}.{png,jpg,jpeg}[+.svg]``.

    Never raises: a broken category or template is skipped and logged, and a
    root that cannot be listed yields an empty catalog with ``error`` set.
    """
    try:
        folders = list_category_dirs(root)
    except OSError as exc:
        LOGGER.error("template discovery failed for %s: %s", root, exc)
        return DiscoveryResult(templates=[], error=str(exc))

    templates: list[Template] = []
    for folder_path in folders:
        try:
            templates.extend(discover_category(folder_path, public_prefix))
        except OSError as exc:
            LOGGER.warning("skipping category %s: %s", folder_path.name, exc)
    LOGGER.debug("discovered %d templates in %s", len(templates), root)
    return DiscoveryResult(templates=templates)
