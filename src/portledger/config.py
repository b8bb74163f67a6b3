from __future__ import annotations

from datetime import date, datetime, time
import os
from pathlib import Path
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "portledger.toml"
ROOT_ENV = "PORTLEDGER_ROOT"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]

_ADD_VERSION_FLAGS: tuple[str, ...] = (
    "overwrite_version",
    "skip_formatting_check",
    "skip_version_format_check",
    "verbose",
)


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def default_root() -> Path:
    env_root = os.getenv(ROOT_ENV, "").strip()
    return Path(env_root) if env_root else Path(".")


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else default_root()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def _section(data: TomlTable, name: str) -> TomlTable:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def add_version_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    section = _section(load_config(root=root, config_path=config_path), "add-version")
    return {key: _as_bool(section[key]) for key in _ADD_VERSION_FLAGS if key in section}


def registry_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    section = _section(load_config(root=root, config_path=config_path), "registry")
    defaults: TomlTable = {}
    for key in ("ports_dir", "versions_dir"):
        value = section.get(key)
        if isinstance(value, str) and value.strip():
            defaults[key] = value.strip()
    return defaults


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged
