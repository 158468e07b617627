from pathlib import Path

import invitekit.discover as discover_module
from invitekit.discover import discover_templates


def test_wedding_scenario(templates_root: Path) -> None:
    result = discover_templates(templates_root)

    assert result.error is None
    assert [tpl.to_dict() for tpl in result.templates] == [
        {
            "id": "wedding-classic",
            "name": "Classic",
            "category": "Wedding",
            "thumbnailSrc": "/templates/wedding/classic.png",
            "textSvg": "/templates/wedding/classic.svg",
            "fields": [
                {"id": "host_name", "label": "Host Name", "placeholder": "Jane & John", "rtl": True},
            ],
            "style": {"canvasWidth": 500, "canvasHeight": 900},
        }
    ]
    assert result.templates[0].overlay_path == templates_root / "wedding" / "classic.svg"


def test_catalog_order_is_folder_then_file_name(tmp_path: Path) -> None:
    for folder in ("bar-mitzvah", "wedding", "birthday"):
        (tmp_path / folder).mkdir()
    for name in ("z.png", "a.jpg", "m.JPEG", "notes.txt"):
        (tmp_path / "wedding" / name).write_bytes(b"")
    (tmp_path / "bar-mitzvah" / "gold_frame.png").write_bytes(b"")
    (tmp_path / "loose.png").write_bytes(b"")

    first = discover_templates(tmp_path)
    second = discover_templates(tmp_path)

    ids = [tpl.id for tpl in first.templates]
    assert ids == ["bar-mitzvah-gold_frame", "wedding-a", "wedding-m", "wedding-z"]
    assert ids == [tpl.id for tpl in second.templates]
    assert first.templates[0].category == "Bar Mitzvah"
    assert first.templates[0].name == "Gold Frame"


def test_template_without_overlay_uses_default_canvas(tmp_path: Path) -> None:
    (tmp_path / "birthday").mkdir()
    (tmp_path / "birthday" / "balloons.jpg").write_bytes(b"")

    (template,) = discover_templates(tmp_path, public_prefix="/static").templates

    assert template.thumbnail_src == "/static/birthday/balloons.jpg"
    assert template.text_svg is None
    assert template.fields is None
    assert template.to_dict()["style"] == {"canvasWidth": 444, "canvasHeight": 630}
    assert "fields" not in template.to_dict()
    assert "textSvg" not in template.to_dict()


def test_overlay_match_is_case_insensitive_and_orphans_are_ignored(tmp_path: Path) -> None:
    folder = tmp_path / "wedding"
    folder.mkdir()
    (folder / "Classic.PNG").write_bytes(b"")
    (folder / "classic.SVG").write_text('<svg viewBox="0 0 10 20"></svg>', encoding="utf-8")
    (folder / "orphan.svg").write_text('<svg viewBox="0 0 10 20"></svg>', encoding="utf-8")

    (template,) = discover_templates(tmp_path).templates

    assert template.id == "wedding-Classic"
    assert template.text_svg == "/templates/wedding/classic.SVG"
    # overlay present but nothing editable
    assert template.fields is None
    assert (template.canvas.width, template.canvas.height) == (10, 20)


def test_fields_always_come_with_an_overlay(templates_root: Path) -> None:
    (templates_root / "wedding" / "plain.jpg").write_bytes(b"")

    for template in discover_templates(templates_root).templates:
        if template.fields is not None:
            assert template.text_svg is not None


def test_unreadable_overlay_skips_only_that_template(templates_root: Path) -> None:
    folder = templates_root / "wedding"
    (folder / "broken.png").write_bytes(b"")
    (folder / "broken.svg").write_bytes(b"\xff\xfe\x00<svg")

    result = discover_templates(templates_root)

    assert result.error is None
    assert [tpl.id for tpl in result.templates] == ["wedding-classic"]


def test_missing_root_returns_empty_catalog_with_error(tmp_path: Path) -> None:
    result = discover_templates(tmp_path / "missing")

    assert result.templates == []
    assert result.error
    assert result.to_dict()["templates"] == []
    assert "error" in result.to_dict()


def test_unlistable_category_skips_only_that_folder(templates_root: Path, monkeypatch) -> None:
    (templates_root / "birthday").mkdir()
    (templates_root / "birthday" / "balloons.jpg").write_bytes(b"")
    real_discover_category = discover_module.discover_category

    def _discover_category(folder_path: Path, public_prefix: str = "/templates"):
        if folder_path.name == "birthday":
            raise PermissionError(13, "Permission denied", str(folder_path))
        return real_discover_category(folder_path, public_prefix)

    monkeypatch.setattr(discover_module, "discover_category", _discover_category)

    result = discover_templates(templates_root)

    assert result.error is None
    assert [tpl.id for tpl in result.templates] == ["wedding-classic"]
