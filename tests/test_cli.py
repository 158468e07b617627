import json
from pathlib import Path

from PIL import Image
from typer.testing import CliRunner

from invitekit.cli import app
from invitekit.config import DEFAULT_CONFIG, load_config

runner = CliRunner()


def test_catalog_prints_json(templates_root: Path) -> None:
    result = runner.invoke(app, ["catalog", str(templates_root)])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["templates"][0]["id"] == "wedding-classic"


def test_catalog_missing_root_exits_nonzero(tmp_path: Path) -> None:
    result = runner.invoke(app, ["catalog", str(tmp_path / "missing")])

    assert result.exit_code == 1


def test_inject_writes_output_file(templates_root: Path, tmp_path: Path) -> None:
    values = tmp_path / "values.json"
    values.write_text(json.dumps({"fieldValues": {"host_name": "Dana"}}), encoding="utf-8")
    out = tmp_path / "out" / "result.svg"

    result = runner.invoke(
        app,
        ["inject", str(templates_root / "wedding" / "classic.svg"), "--values", str(values), "--out", str(out)],
    )

    assert result.exit_code == 0
    written = out.read_text(encoding="utf-8")
    assert "Dana" in written
    assert 'width="100%"' in written


def test_inject_set_overrides_values_file(templates_root: Path) -> None:
    result = runner.invoke(
        app,
        ["inject", str(templates_root / "wedding" / "classic.svg"), "--set", "host_name=Sarah"],
    )

    assert result.exit_code == 0
    assert "Sarah" in result.stdout
    assert "Jane &amp; John" not in result.stdout


def test_inject_rejects_bad_assignment(templates_root: Path) -> None:
    result = runner.invoke(app, ["inject", str(templates_root / "wedding" / "classic.svg"), "--set", "oops"])

    assert result.exit_code == 1


def test_check_passes_and_fails(templates_root: Path) -> None:
    Image.new("RGB", (500, 900), color="#FFFFFF").save(templates_root / "wedding" / "classic.png")

    ok = runner.invoke(app, ["check", str(templates_root)])
    assert ok.exit_code == 0
    assert "All templates are valid!" in ok.stdout

    (templates_root / "wedding" / "orphan.svg").write_text("<svg></svg>", encoding="utf-8")
    failed = runner.invoke(app, ["check", str(templates_root)])
    assert failed.exit_code == 1


def test_sizes_lists_presets() -> None:
    result = runner.invoke(app, ["sizes"])

    assert result.exit_code == 0
    assert [item["key"] for item in json.loads(result.stdout)] == ["portrait", "square", "a4", "landscape", "story"]


def test_check_reports_unreadable_overlay(templates_root: Path) -> None:
    (templates_root / "wedding" / "broken.svg").write_bytes(b"\xff\xfe<svg>")

    result = runner.invoke(app, ["check", str(templates_root)])

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Unreadable overlay" in result.stdout
    assert "classic.svg" in result.stdout


def test_init_config_writes_to_env_path(tmp_path: Path, monkeypatch) -> None:
    target = tmp_path / "cfg" / "config.yaml"
    monkeypatch.setenv("INVITEKIT_CONFIG", str(target))

    result = runner.invoke(app, ["init-config"])

    assert result.exit_code == 0
    assert str(target) in result.stdout
    assert load_config(target) == DEFAULT_CONFIG

    target.write_text("port: 9000\n", encoding="utf-8")
    kept = runner.invoke(app, ["init-config"])
    assert kept.exit_code == 0
    assert load_config(target)["port"] == 9000

    forced = runner.invoke(app, ["init-config", "--force"])
    assert forced.exit_code == 0
    assert load_config(target) == DEFAULT_CONFIG
