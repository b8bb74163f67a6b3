from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping

from portledger.add_version import AddVersionDeps
from portledger.recipe import load_port_recipe, read_manifest_text, render_canonical_manifest
from portledger.registry import RegistryPaths


def manifest_text(name: str, version: str, *, field: str = "version", port_version: int = 0) -> str:
    payload: dict[str, object] = {"name": name, field: version}
    if port_version:
        payload["port-version"] = port_version
    payload["description"] = f"The {name} library"
    return json.dumps(payload, indent=2) + "\n"


def write_port(
    paths: RegistryPaths,
    name: str,
    version: str,
    *,
    field: str = "version",
    port_version: int = 0,
) -> Path:
    manifest = paths.manifest_path(name)
    manifest.parent.mkdir(parents=True, exist_ok=True)
    manifest.write_text(
        manifest_text(name, version, field=field, port_version=port_version),
        encoding="utf-8",
    )
    return manifest


def write_baseline_payload(paths: RegistryPaths, default: Mapping[str, object]) -> Path:
    path = paths.baseline_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"default": dict(default)}, indent=2) + "\n", encoding="utf-8")
    return path


class RecordingOutput:
    def __init__(self) -> None:
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []


def make_deps(
    paths: RegistryPaths,
    *,
    git_trees: dict[str, str],
    output: RecordingOutput,
    local_changes: Mapping[str, bool | None] | None = None,
    replace_fn=None,
) -> AddVersionDeps:
    changes = dict(local_changes or {})
    extra = {} if replace_fn is None else {"replace_fn": replace_fn}
    return AddVersionDeps(
        port_exists=lambda port_name: paths.port_dir(port_name).is_dir(),
        load_recipe=lambda port_name: load_port_recipe(paths, port_name),
        read_manifest_text=lambda port_name: read_manifest_text(paths, port_name),
        render_canonical=render_canonical_manifest,
        git_tree_map=lambda: dict(git_trees),
        has_local_changes=lambda port_name: changes.get(port_name, False),
        list_ports=paths.list_ports,
        echo=output.infos.append,
        warn=output.warnings.append,
        error=output.errors.append,
        **extra,
    )
