from __future__ import annotations

from typing import MutableMapping

from portledger.history import UpdateResult
from portledger.versions import Version

BaselineMap = MutableMapping[str, Version]


def reconcile_baseline(
    baseline: BaselineMap,
    *,
    port_name: str,
    version: Version,
) -> UpdateResult:
    """Point `port_name` at `version` in the shared baseline map."""
    current = baseline.get(port_name)
    if current == version:
        return UpdateResult.NOT_UPDATED
    baseline[port_name] = version
    return UpdateResult.UPDATED
