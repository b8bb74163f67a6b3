"""Value types for the JSON documents the ledger reads and writes.

Baseline files, history files and port manifests are all JSON objects at
the top level; `LedgerDocument` names that shape for the codec.
"""

from __future__ import annotations

from typing import TypeAlias


JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]
LedgerDocument: TypeAlias = JSONObject
