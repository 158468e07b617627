from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from invitekit.constants import OVERLAY_EXTENSION
from invitekit.discover import is_raster, list_category_dirs, raster_stem
from invitekit.overlay.parser import VIEW_BOX_RE, is_reserved_group_id, iter_group_ids, split_view_box

LOGGER = logging.getLogger(__name__)

ASPECT_TOLERANCE = 0.01

_ID_GROUP_BLOCK_RE = re.compile(r'<g\b[^>]*\bid="[^"]*"[^>]*>[\s\S]*?</g>')
_TEXT_TAG_RE = re.compile(r"<text\b")

ISSUE_MISSING_VIEW_BOX = "missing viewBox"
ISSUE_NO_IMAGE = "no matching image"
ISSUE_ASPECT_MISMATCH = "aspect ratio mismatch"
ISSUE_NO_EDITABLE_GROUPS = "no editable groups"
ISSUE_BARE_TEXT = "bare text elements"
ISSUE_UNREADABLE = "unreadable overlay"


@dataclass(slots=True)
class OverlayReport:
    svg_name: str
    view_box: tuple[float, float] | None = None
    image_name: str | None = None
    image_size: tuple[int, int] | None = None
    editable_ids: list[str] = field(default_factory=list)
    has_static_text: bool = False
    has_bare_text: bool = False
    issues: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    @property
    def aspect_ratios(self) -> tuple[float, float] | None:
        if not self.view_box or not self.image_size:
            return None
        vb_w, vb_h = self.view_box
        img_w, img_h = self.image_size
        if vb_h <= 0 or img_h <= 0:
            return None
        return img_w / img_h, vb_w / vb_h


@dataclass(slots=True)
class FolderReport:
    folder: str
    overlays: list[OverlayReport] = field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return sum(len(report.issues) for report in self.overlays)


def read_view_box(content: str) -> tuple[float, float] | None:
    match = VIEW_BOX_RE.search(content)
    if not match:
        return None
    parts = split_view_box(match.group(1))
    if len(parts) < 4:
        return None
    try:
        return float(parts[2]), float(parts[3])
    except ValueError:
        return None


def has_bare_text(content: str) -> bool:
    """True when a ``<text>`` sits outside every ``<g id="...">`` block."""
    stripped = content
    while True:
        reduced = _ID_GROUP_BLOCK_RE.sub("", stripped)
        if reduced == stripped:
            break
        stripped = reduced
    return bool(_TEXT_TAG_RE.search(stripped))


def read_image_size(path: Path) -> tuple[int, int] | None:
    try:
        with Image.open(path) as image:
            return image.size
    except OSError as exc:
        LOGGER.debug("cannot read image size of %s: %s", path, exc)
        return None


def check_overlay(folder_path: Path, svg_name: str, image_names: list[str]) -> OverlayReport:
    report = OverlayReport(svg_name=svg_name)
    content = (folder_path / svg_name).read_text(encoding="utf-8")
    stem = Path(svg_name).stem.lower()

    report.view_box = read_view_box(content)
    if report.view_box is None:
        report.issues.append(ISSUE_MISSING_VIEW_BOX)

    report.image_name = next((name for name in image_names if raster_stem(name).lower() == stem), None)
    if report.image_name is None:
        report.issues.append(ISSUE_NO_IMAGE)
    else:
        report.image_size = read_image_size(folder_path / report.image_name)
        ratios = report.aspect_ratios
        if ratios is not None and abs(ratios[0] - ratios[1]) >= ASPECT_TOLERANCE:
            report.issues.append(ISSUE_ASPECT_MISMATCH)

    group_ids = [group_id for group_id, _ in iter_group_ids(content)]
    report.editable_ids = [group_id for group_id in group_ids if not is_reserved_group_id(group_id)]
    if not report.editable_ids:
        report.issues.append(ISSUE_NO_EDITABLE_GROUPS)
    report.has_static_text = "static_text" in group_ids

    report.has_bare_text = has_bare_text(content)
    if report.has_bare_text:
        report.issues.append(ISSUE_BARE_TEXT)
    return report


def check_templates(root: Path) -> list[FolderReport]:
    reports: list[FolderReport] = []
    for folder_path in list_category_dirs(root):
        file_names = [entry.name for entry in folder_path.iterdir() if entry.is_file()]
        image_names = [name for name in file_names if is_raster(name)]
        svg_names = sorted(name for name in file_names if name.lower().endswith(OVERLAY_EXTENSION))
        folder_report = FolderReport(folder=folder_path.name)
        for svg_name in svg_names:
            try:
                report = check_overlay(folder_path, svg_name, image_names)
            except (OSError, UnicodeDecodeError) as exc:
                LOGGER.warning("cannot read overlay %s/%s: %s", folder_path.name, svg_name, exc)
                report = OverlayReport(svg_name=svg_name, issues=[ISSUE_UNREADABLE])
            folder_report.overlays.append(report)
        reports.append(folder_report)
    return reports
