from pathlib import Path

from PIL import Image

from invitekit.check import (
    ISSUE_ASPECT_MISMATCH,
    ISSUE_BARE_TEXT,
    ISSUE_MISSING_VIEW_BOX,
    ISSUE_NO_EDITABLE_GROUPS,
    ISSUE_NO_IMAGE,
    ISSUE_UNREADABLE,
    check_templates,
    has_bare_text,
)

GOOD_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 500 900">'
    '<g id="static_text"><text><tspan>Welcome</tspan></text></g>'
    '<g id="host_name"><text><tspan>Jane</tspan></text></g></svg>'
)


def _write_image(path: Path, size: tuple[int, int]) -> None:
    Image.new("RGB", size, color="#FFFFFF").save(path)


def test_valid_overlay_has_no_issues(tmp_path: Path) -> None:
    folder = tmp_path / "wedding"
    folder.mkdir()
    _write_image(folder / "classic.png", (250, 450))
    (folder / "classic.svg").write_text(GOOD_SVG, encoding="utf-8")

    (folder_report,) = check_templates(tmp_path)
    (report,) = folder_report.overlays

    assert report.ok
    assert report.view_box == (500.0, 900.0)
    assert report.image_name == "classic.png"
    assert report.image_size == (250, 450)
    assert report.editable_ids == ["host_name"]
    assert report.has_static_text is True
    assert folder_report.issue_count == 0


def test_reports_each_kind_of_problem(tmp_path: Path) -> None:
    folder = tmp_path / "birthday"
    folder.mkdir()
    _write_image(folder / "wide.jpg", (800, 100))
    (folder / "wide.svg").write_text(GOOD_SVG, encoding="utf-8")
    (folder / "lonely.svg").write_text(
        '<svg><g id="background"></g><text><tspan>loose</tspan></text></svg>', encoding="utf-8"
    )

    (folder_report,) = check_templates(tmp_path)
    reports = {report.svg_name: report for report in folder_report.overlays}

    assert reports["wide.svg"].issues == [ISSUE_ASPECT_MISMATCH]
    assert reports["lonely.svg"].issues == [
        ISSUE_MISSING_VIEW_BOX,
        ISSUE_NO_IMAGE,
        ISSUE_NO_EDITABLE_GROUPS,
        ISSUE_BARE_TEXT,
    ]
    assert folder_report.issue_count == 5


def test_has_bare_text_ignores_text_inside_id_groups() -> None:
    assert has_bare_text('<svg><g id="a"><text/></g><g id="b"><text/></g></svg>') is False
    assert has_bare_text('<svg><g id="a"><text/></g><text/></svg>') is True
    assert has_bare_text('<svg><g class="plain"><text/></g></svg>') is True


def test_unreadable_overlay_is_reported_and_scan_continues(tmp_path: Path) -> None:
    folder = tmp_path / "wedding"
    folder.mkdir()
    (folder / "a.svg").write_bytes(b"\xff\xfe<svg>")
    _write_image(folder / "b.png", (250, 450))
    (folder / "b.svg").write_text(GOOD_SVG, encoding="utf-8")

    (folder_report,) = check_templates(tmp_path)
    reports = {report.svg_name: report for report in folder_report.overlays}

    assert reports["a.svg"].issues == [ISSUE_UNREADABLE]
    assert reports["b.svg"].ok
    assert folder_report.issue_count == 1
