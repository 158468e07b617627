from __future__ import annotations

from pathlib import Path

import pytest

WEDDING_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 500 900">
  <g id="static_text">
    <text transform="translate(180 120)" font-size="18"><tspan x="0" y="0">You are invited</tspan></text>
  </g>
  <g id="host_name">
    <text transform="translate(250 400)" font-family="'Heebo', sans-serif" font-size="32"><tspan x="0" y="0">Jane &amp; John</tspan></text>
  </g>
</svg>
"""


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("INVITEKIT_CONFIG", str(tmp_path / "no-such-config.yaml"))


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    root = tmp_path / "templates"
    wedding = root / "wedding"
    wedding.mkdir(parents=True)
    (wedding / "classic.png").write_bytes(b"")
    (wedding / "classic.svg").write_text(WEDDING_SVG, encoding="utf-8")
    return root
