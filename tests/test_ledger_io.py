from __future__ import annotations

import json
from pathlib import Path

import pytest

from portledger.exceptions import MalformedLedgerFile, PreconditionMissing
from portledger.history import HistoryEntry
from portledger.ledger_io import (
    atomic_write_text,
    dump_baseline,
    dump_history,
    load_baseline,
    load_history,
    temp_path_for,
    write_baseline,
    write_history,
)
from portledger.versions import SchemedVersion, Version, VersionScheme

_TREE_A = "a" * 40
_TREE_B = "b" * 40


def _entry(text: str, tree: str, scheme: VersionScheme = VersionScheme.RELAXED, port_version: int = 0) -> HistoryEntry:
    return HistoryEntry(SchemedVersion(scheme, Version(text, port_version)), tree)


def test_dump_baseline_layout_sorted_by_port_name() -> None:
    text = dump_baseline({"zlib": Version("1.3", 1), "abseil": Version("2024-01-16")})
    assert text == (
        "{\n"
        '  "default": {\n'
        '    "abseil": {\n'
        '      "baseline": "2024-01-16",\n'
        '      "port-version": 0\n'
        "    },\n"
        '    "zlib": {\n'
        '      "baseline": "1.3",\n'
        '      "port-version": 1\n'
        "    }\n"
        "  }\n"
        "}\n"
    )


def test_dump_history_keeps_order_and_scheme_fields() -> None:
    payload = json.loads(
        dump_history(
            [
                _entry("2.0", _TREE_B, VersionScheme.SEMVER),
                _entry("vista", _TREE_A, VersionScheme.STRING, 2),
            ]
        )
    )
    assert payload == {
        "versions": [
            {"git-tree": _TREE_B, "version-semver": "2.0", "port-version": 0},
            {"git-tree": _TREE_A, "version-string": "vista", "port-version": 2},
        ]
    }


def test_baseline_round_trip_defaults_port_version(tmp_path: Path) -> None:
    path = tmp_path / "versions" / "baseline.json"
    baseline: dict[str, Version] = {}
    baseline["pkg"] = Version("2.0.0")
    write_baseline(path, baseline)
    assert load_baseline(path) == {"pkg": Version("2.0.0", 0)}


def test_history_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "p-" / "pkg.json"
    entries = [_entry("1.1", _TREE_B), _entry("2021-01-01", _TREE_A, VersionScheme.DATE)]
    write_history(path, entries)
    assert load_history(path, port_name="pkg") == entries


def test_missing_baseline_is_precondition_failure(tmp_path: Path) -> None:
    with pytest.raises(PreconditionMissing):
        load_baseline(tmp_path / "baseline.json")


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        "{}",
        '{"default": {"pkg": {"baseline": 1}}}',
        '{"default": {"pkg": {"baseline": "1.0", "port-version": -1}}}',
    ],
)
def test_malformed_baseline(tmp_path: Path, text: str) -> None:
    path = tmp_path / "baseline.json"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(MalformedLedgerFile):
        load_baseline(path)


def test_missing_history_means_no_prior_history(tmp_path: Path) -> None:
    assert load_history(tmp_path / "z-" / "zlib.json") is None


@pytest.mark.parametrize(
    "payload",
    [
        {"versions": [{"version": "1.0", "port-version": 0}]},
        {"versions": [{"git-tree": _TREE_A, "port-version": 0}]},
        {"versions": [{"git-tree": _TREE_A, "version": "1.0", "version-date": "2020-01-01"}]},
        {"versions": {"git-tree": _TREE_A}},
        {"entries": []},
    ],
)
def test_malformed_history(tmp_path: Path, payload: object) -> None:
    path = tmp_path / "pkg.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(MalformedLedgerFile) as exc:
        load_history(path, port_name="pkg")
    assert exc.value.port_name == "pkg"


def test_atomic_write_replaces_content_and_leaves_no_temp(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "file.json"
    atomic_write_text(path, "one\n")
    atomic_write_text(path, "two\n")
    assert path.read_text(encoding="utf-8") == "two\n"
    assert not temp_path_for(path).exists()


def test_atomic_write_failure_before_rename_keeps_original(tmp_path: Path) -> None:
    path = tmp_path / "baseline.json"
    path.write_text("original\n", encoding="utf-8")
    seen: list[str] = []

    def _failing_replace(src: Path, dst: Path) -> None:
        seen.append(Path(src).read_text(encoding="utf-8"))
        raise OSError("simulated crash before rename")

    with pytest.raises(OSError, match="simulated crash"):
        atomic_write_text(path, "replacement\n", replace_fn=_failing_replace)
    assert seen == ["replacement\n"]
    assert path.read_text(encoding="utf-8") == "original\n"
    assert not temp_path_for(path).exists()
