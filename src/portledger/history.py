"""Reconcile a port's version history with its current recipe state.

A history is the newest-first list of every version recorded for one port,
each bound to the `git-tree` fingerprint of the recipe that produced it. The
reconciler never touches the filesystem: it returns the (possibly) updated
entries together with the outcome, and any refusal as a value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

from portledger.exceptions import (
    ContentUnchangedVersionChanged,
    LedgerError,
    VersionConflict,
)
from portledger.versions import SchemedVersion


class UpdateResult(str, Enum):
    UPDATED = "updated"
    NOT_UPDATED = "not_updated"


@dataclass(frozen=True)
class HistoryEntry:
    version: SchemedVersion
    git_tree: str


@dataclass(frozen=True)
class HistoryReconciliation:
    result: UpdateResult
    entries: list[HistoryEntry]
    new_file: bool = False
    issue: LedgerError | None = None

    @property
    def updated(self) -> bool:
        return self.result is UpdateResult.UPDATED


def _find_by_git_tree(entries: Sequence[HistoryEntry], git_tree: str) -> int | None:
    for index, entry in enumerate(entries):
        if entry.git_tree == git_tree:
            return index
    return None


def _find_by_version(entries: Sequence[HistoryEntry], version: SchemedVersion) -> int | None:
    for index, entry in enumerate(entries):
        if entry.version.version == version.version:
            return index
    return None


def reconcile_history(
    history: Sequence[HistoryEntry] | None,
    *,
    port_name: str,
    version: SchemedVersion,
    git_tree: str,
    overwrite_version: bool = False,
) -> HistoryReconciliation:
    """Decide how `version` at `git_tree` fits into an existing history.

    `history is None` means no history file exists yet. The returned entries
    are always a fresh list; the input sequence is never mutated.
    """
    new_entry = HistoryEntry(version=version, git_tree=git_tree)
    if history is None:
        return HistoryReconciliation(
            result=UpdateResult.UPDATED,
            entries=[new_entry],
            new_file=True,
        )

    entries = list(history)
    same_tree = _find_by_git_tree(entries, git_tree)
    if same_tree is not None:
        recorded = entries[same_tree].version
        if recorded.version == version.version:
            return HistoryReconciliation(result=UpdateResult.NOT_UPDATED, entries=entries)
        return HistoryReconciliation(
            result=UpdateResult.NOT_UPDATED,
            entries=entries,
            issue=ContentUnchangedVersionChanged(
                port_name,
                recorded_version=recorded.version,
                requested_version=version.version,
                git_tree=git_tree,
            ),
        )

    same_version = _find_by_version(entries, version)
    if same_version is not None:
        if not overwrite_version:
            return HistoryReconciliation(
                result=UpdateResult.NOT_UPDATED,
                entries=entries,
                issue=VersionConflict(
                    port_name,
                    version=version.version,
                    old_git_tree=entries[same_version].git_tree,
                    new_git_tree=git_tree,
                ),
            )
        entries[same_version] = new_entry
    else:
        entries.insert(0, new_entry)
    return HistoryReconciliation(result=UpdateResult.UPDATED, entries=entries)
