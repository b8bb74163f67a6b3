from __future__ import annotations

import subprocess
from typing import Callable

from portledger.registry import RegistryPaths

RunCommand = Callable[..., subprocess.CompletedProcess[str]]


def _git(
    paths: RegistryPaths,
    *args: str,
    run: RunCommand,
) -> subprocess.CompletedProcess[str] | None:
    try:
        return run(
            ["git", "-C", str(paths.root), *args],
            check=False,
            capture_output=True,
            text=True,
        )
    except OSError:
        return None


def parse_ls_tree(output: str) -> dict[str, str]:
    """Map each directory name in `git ls-tree -d` output to its tree id."""
    trees: dict[str, str] = {}
    for line in output.splitlines():
        meta, sep, path = line.partition("\t")
        if not sep:
            continue
        parts = meta.split()
        if len(parts) != 3 or parts[1] != "tree":
            continue
        name = path.rstrip("/").rsplit("/", 1)[-1]
        if name:
            trees[name] = parts[2]
    return trees


def port_git_tree_map(
    paths: RegistryPaths,
    *,
    run: RunCommand = subprocess.run,
) -> dict[str, str]:
    """Committed tree id of every port directory at HEAD.

    An empty map means the lookup failed; callers then report each port's
    fingerprint as unavailable.
    """
    result = _git(
        paths,
        "ls-tree",
        "-d",
        "HEAD",
        "--",
        f"{paths.ports_rel.as_posix()}/",
        run=run,
    )
    if result is None or result.returncode != 0:
        return {}
    return parse_ls_tree(result.stdout)


def port_has_local_changes(
    paths: RegistryPaths,
    port_name: str,
    *,
    run: RunCommand = subprocess.run,
) -> bool | None:
    result = _git(
        paths,
        "status",
        "--porcelain",
        "--",
        f"{paths.ports_rel.as_posix()}/{port_name}",
        run=run,
    )
    if result is None or result.returncode != 0:
        return None
    return bool(result.stdout.strip())
