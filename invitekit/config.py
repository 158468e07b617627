from __future__ import annotations

import copy
import os
import platform
from pathlib import Path
from typing import Any

import yaml

from invitekit.constants import DEFAULT_PUBLIC_PREFIX

CONFIG_ENV_VAR = "INVITEKIT_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    "templates_dir": "public/templates",
    "public_prefix": DEFAULT_PUBLIC_PREFIX,
    "font_dirs": [],
    "font_path": None,
    "host": "127.0.0.1",
    "port": 8000,
    "log_level": "info",
}


def get_user_data_dir() -> Path:
    system_name = platform.system().lower()
    if system_name == "windows":
        base = (
            os.environ.get("APPDATA")
            or os.environ.get("LOCALAPPDATA")
            or str(Path.home() / "AppData" / "Roaming")
        )
        return Path(base) / "InviteKit"
    if system_name == "darwin":
        return Path.home() / "Library" / "Application Support" / "InviteKit"

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        return Path(xdg_config_home) / "InviteKit"
    return Path.home() / ".config" / "InviteKit"


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return get_user_data_dir() / "Config" / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    text = cfg_path.read_text(encoding="utf-8")
    loaded = yaml.safe_load(text) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"config file is not a mapping: {cfg_path}")
    return _deep_merge(DEFAULT_CONFIG, loaded)


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg_path.write_text(
        yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    return cfg_path


def templates_root(cfg: dict[str, Any]) -> Path:
    return Path(str(cfg.get("templates_dir") or DEFAULT_CONFIG["templates_dir"])).expanduser()


def font_dirs(cfg: dict[str, Any]) -> list[str]:
    dirs = cfg.get("font_dirs") or []
    if isinstance(dirs, str):
        dirs = [dirs]
    return [str(Path(str(item)).expanduser()) for item in dirs]
