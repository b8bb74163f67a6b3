"""Read and write the baseline file and the per-port history files.

Both files are 2-space indented UTF-8 JSON with a trailing newline. Writes go
through `atomic_write_text`, so a reader sees either the previous content or
the new content, never a partial file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Callable, Iterable, Mapping

from pydantic import ValidationError

from portledger.exceptions import MalformedLedgerFile, PreconditionMissing
from portledger.history import HistoryEntry
from portledger.json_types import JSONObject, JSONValue, LedgerDocument
from portledger.schema import BaselineFileDTO, VersionsFileDTO
from portledger.versions import (
    SchemedVersion,
    Version,
    decode_schemed_version,
    encode_schemed_version,
    encode_version,
)

BASELINE_FIELD = "baseline"
DEFAULT_BASELINE_KEY = "default"
GIT_TREE_FIELD = "git-tree"
VERSIONS_KEY = "versions"
TEMP_SUFFIX = ".tmp"

ReplaceFn = Callable[[Path, Path], None]


def dump_json_text(payload: JSONValue) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def temp_path_for(path: Path) -> Path:
    return path.with_name(path.name + TEMP_SUFFIX)


def atomic_write_text(
    path: Path,
    text: str,
    *,
    replace_fn: ReplaceFn = os.replace,
) -> None:
    """Write `text` to a sibling temp file, then rename it over `path`."""
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = temp_path_for(path)
    try:
        temp_path.write_text(text, encoding="utf-8")
        replace_fn(temp_path, path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise


def _read_json(path: Path, *, port_name: str | None) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeError, json.JSONDecodeError) as exc:
        raise MalformedLedgerFile(path, str(exc), port_name=port_name) from exc


def serialize_baseline(baseline: Mapping[str, Version]) -> LedgerDocument:
    entries: JSONObject = {}
    for port_name in sorted(baseline):
        entries[port_name] = encode_version(baseline[port_name], BASELINE_FIELD)
    return {DEFAULT_BASELINE_KEY: entries}


def serialize_versions(entries: Iterable[HistoryEntry]) -> LedgerDocument:
    versions: list[JSONValue] = []
    for entry in entries:
        payload: JSONObject = {GIT_TREE_FIELD: entry.git_tree}
        payload.update(encode_schemed_version(entry.version))
        versions.append(payload)
    return {VERSIONS_KEY: versions}


def dump_baseline(baseline: Mapping[str, Version]) -> str:
    return dump_json_text(serialize_baseline(baseline))


def dump_history(entries: Iterable[HistoryEntry]) -> str:
    return dump_json_text(serialize_versions(entries))


def parse_baseline(payload: object, *, path: Path) -> dict[str, Version]:
    try:
        model = BaselineFileDTO.model_validate(payload)
    except ValidationError as exc:
        raise MalformedLedgerFile(path, str(exc)) from exc
    return {
        port_name: Version(entry.baseline, entry.port_version)
        for port_name, entry in model.default.items()
    }


def parse_versions(
    payload: object,
    *,
    path: Path,
    port_name: str | None = None,
) -> list[HistoryEntry]:
    try:
        model = VersionsFileDTO.model_validate(payload)
        entries: list[HistoryEntry] = []
        for item in model.versions:
            schemed: SchemedVersion = decode_schemed_version(
                item.model_dump(by_alias=True, exclude_none=True)
            )
            entries.append(HistoryEntry(version=schemed, git_tree=item.git_tree))
    except ValueError as exc:
        # Also covers pydantic's ValidationError.
        raise MalformedLedgerFile(path, str(exc), port_name=port_name) from exc
    return entries


def load_baseline(path: Path) -> dict[str, Version]:
    if not path.exists():
        raise PreconditionMissing(path)
    return parse_baseline(_read_json(path, port_name=None), path=path)


def load_history(path: Path, *, port_name: str | None = None) -> list[HistoryEntry] | None:
    """Return the recorded history, or None when the port has none yet."""
    if not path.exists():
        return None
    return parse_versions(_read_json(path, port_name=port_name), path=path, port_name=port_name)


def write_baseline(
    path: Path,
    baseline: Mapping[str, Version],
    *,
    replace_fn: ReplaceFn = os.replace,
) -> None:
    atomic_write_text(path, dump_baseline(baseline), replace_fn=replace_fn)


def write_history(
    path: Path,
    entries: Iterable[HistoryEntry],
    *,
    replace_fn: ReplaceFn = os.replace,
) -> None:
    atomic_write_text(path, dump_history(entries), replace_fn=replace_fn)
