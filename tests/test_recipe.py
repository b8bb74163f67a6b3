from __future__ import annotations

import json
from pathlib import Path

import pytest

from portledger.exceptions import RecipeLoadFailed
from portledger.recipe import (
    canonical_manifest,
    format_manifest,
    load_port_recipe,
    render_canonical_manifest,
)
from portledger.registry import RegistryPaths
from portledger.versions import SchemedVersion, Version, VersionScheme
from tests.registry_helpers import write_port


def test_load_port_recipe_reads_schemed_version(registry: RegistryPaths) -> None:
    write_port(registry, "alpha", "1.2.3", field="version-semver", port_version=4)
    recipe = load_port_recipe(registry, "alpha")
    assert recipe.name == "alpha"
    assert recipe.version == SchemedVersion(VersionScheme.SEMVER, Version("1.2.3", 4))


def test_missing_manifest_is_load_failure(registry: RegistryPaths) -> None:
    registry.port_dir("alpha").mkdir()
    with pytest.raises(RecipeLoadFailed, match="alpha"):
        load_port_recipe(registry, "alpha")


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"version": "1.0"},
        {"name": "other", "version": "1.0"},
        {"name": "alpha"},
        {"name": "alpha", "version": "1.0", "version-date": "2020-01-01"},
    ],
)
def test_invalid_manifests(registry: RegistryPaths, payload: object) -> None:
    manifest = registry.manifest_path("alpha")
    manifest.parent.mkdir(parents=True)
    manifest.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(RecipeLoadFailed):
        load_port_recipe(registry, "alpha")


def test_canonical_manifest_key_order() -> None:
    ordered = canonical_manifest(
        {
            "zeta": 1,
            "dependencies": ["zlib"],
            "description": "d",
            "port-version": 1,
            "version": "1.0",
            "alpha": 2,
            "name": "pkg",
        }
    )
    assert list(ordered) == [
        "name",
        "version",
        "port-version",
        "description",
        "dependencies",
        "alpha",
        "zeta",
    ]


def test_format_manifest_rewrites_once(registry: RegistryPaths) -> None:
    manifest: Path = registry.manifest_path("alpha")
    manifest.parent.mkdir(parents=True)
    manifest.write_text('{"version": "1.0", "name": "alpha"}', encoding="utf-8")

    assert format_manifest(registry, "alpha")
    recipe = load_port_recipe(registry, "alpha")
    assert manifest.read_text(encoding="utf-8") == render_canonical_manifest(recipe)
    assert not format_manifest(registry, "alpha")
