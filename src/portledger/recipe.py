"""Default recipe collaborators: manifest loading and canonical rendering.

A port's recipe is its `vcpkg.json` manifest. The ledger only needs the
port's name and schemed version from it, plus the canonical text used by the
formatting check.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import os
from pathlib import Path

from portledger.exceptions import RecipeLoadFailed
from portledger.json_types import JSONObject
from portledger.ledger_io import ReplaceFn, atomic_write_text, dump_json_text
from portledger.registry import RegistryPaths
from portledger.versions import (
    PORT_VERSION_FIELD,
    VERSION_FIELDS,
    SchemedVersion,
    decode_schemed_version,
)

# Leading keys of a canonical manifest; any other keys follow in lexical order.
CANONICAL_KEY_ORDER: tuple[str, ...] = (
    "name",
    *VERSION_FIELDS,
    PORT_VERSION_FIELD,
    "maintainers",
    "description",
    "homepage",
    "documentation",
    "license",
    "supports",
    "builtin-baseline",
    "dependencies",
    "overrides",
    "default-features",
    "features",
)


@dataclass(frozen=True)
class PortRecipe:
    name: str
    version: SchemedVersion
    manifest: JSONObject = field(default_factory=dict, compare=False)


def parse_manifest(payload: object, *, port_name: str) -> PortRecipe:
    if not isinstance(payload, dict):
        raise RecipeLoadFailed(port_name, "manifest must be a JSON object")
    name = payload.get("name")
    if not isinstance(name, str) or not name:
        raise RecipeLoadFailed(port_name, "manifest is missing a string \"name\"")
    if name != port_name:
        raise RecipeLoadFailed(
            port_name,
            f"manifest name {name!r} does not match the port directory {port_name!r}",
        )
    try:
        version = decode_schemed_version(payload)
    except ValueError as exc:
        raise RecipeLoadFailed(port_name, str(exc)) from exc
    return PortRecipe(name=name, version=version, manifest=payload)


def load_port_recipe(paths: RegistryPaths, port_name: str) -> PortRecipe:
    manifest_path = paths.manifest_path(port_name)
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise RecipeLoadFailed(port_name, f"missing manifest {manifest_path}") from exc
    except (OSError, UnicodeError) as exc:
        raise RecipeLoadFailed(port_name, f"failed to read {manifest_path}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise RecipeLoadFailed(port_name, f"{manifest_path}: {exc}") from exc
    return parse_manifest(payload, port_name=port_name)


def canonical_manifest(manifest: JSONObject) -> JSONObject:
    ordered: JSONObject = {}
    for key in CANONICAL_KEY_ORDER:
        if key in manifest:
            ordered[key] = manifest[key]
    for key in sorted(manifest):
        if key not in ordered:
            ordered[key] = manifest[key]
    return ordered


def render_canonical_manifest(recipe: PortRecipe) -> str:
    return dump_json_text(canonical_manifest(recipe.manifest))


def read_manifest_text(paths: RegistryPaths, port_name: str) -> str | None:
    try:
        return paths.manifest_path(port_name).read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def format_manifest(
    paths: RegistryPaths,
    port_name: str,
    *,
    replace_fn: ReplaceFn = os.replace,
) -> bool:
    """Rewrite a port's manifest in canonical form; True if it changed."""
    recipe = load_port_recipe(paths, port_name)
    manifest_path: Path = paths.manifest_path(port_name)
    formatted = render_canonical_manifest(recipe)
    if read_manifest_text(paths, port_name) == formatted:
        return False
    atomic_write_text(manifest_path, formatted, replace_fn=replace_fn)
    return True
