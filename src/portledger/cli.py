from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Mapping, Optional

import typer

from portledger.add_version import (
    AddVersionDeps,
    AddVersionOptions,
    RunSummary,
    default_deps,
    run_add_version,
)
from portledger.command_ids import (
    ADD_VERSION_COMMAND,
    FORMAT_MANIFEST_COMMAND,
    OPTION_ALL,
    OPTION_OVERWRITE_VERSION,
    OPTION_SKIP_FORMATTING_CHECK,
    OPTION_SKIP_VERSION_FORMAT_CHECK,
    OPTION_VERBOSE,
)
from portledger.config import (
    add_version_defaults,
    default_root,
    merge_payload,
    registry_defaults,
)
from portledger.exceptions import LedgerError, UsageError
from portledger.ledger_io import atomic_write_text, dump_json_text
from portledger.recipe import format_manifest
from portledger.registry import DEFAULT_PORTS_DIR, DEFAULT_VERSIONS_DIR, RegistryPaths

app = typer.Typer(add_completion=False)

DepsFactory = Callable[[RegistryPaths], AddVersionDeps]

_USAGE_EXIT = 2
_FAILURE_EXIT = 1


def _echo_success(message: str) -> None:
    typer.secho(message, fg=typer.colors.GREEN)


def _echo_warning(message: str) -> None:
    typer.secho(f"warning: {message}", err=True, fg=typer.colors.YELLOW)


def _echo_error(message: str) -> None:
    typer.secho(f"error: {message}", err=True, fg=typer.colors.RED)


def _default_deps_factory(paths: RegistryPaths) -> AddVersionDeps:
    return default_deps(
        paths,
        echo=_echo_success,
        warn=_echo_warning,
        error=_echo_error,
    )


def _context_deps_factory(ctx: typer.Context) -> DepsFactory:
    obj = ctx.obj
    if isinstance(obj, Mapping):
        candidate = obj.get("add_version_deps")
        if callable(candidate):
            return candidate
    return _default_deps_factory


def _registry_paths(root: Path | None, config: Path | None) -> RegistryPaths:
    resolved_root = root if root is not None else default_root()
    layout = registry_defaults(root=resolved_root, config_path=config)
    return RegistryPaths(
        root=resolved_root,
        ports_rel=Path(str(layout.get("ports_dir", DEFAULT_PORTS_DIR))),
        versions_rel=Path(str(layout.get("versions_dir", DEFAULT_VERSIONS_DIR))),
    )


def _write_summary(path: Path, summary: RunSummary) -> None:
    atomic_write_text(path, dump_json_text(summary.to_payload()))


@app.command(ADD_VERSION_COMMAND)
def add_version(
    ctx: typer.Context,
    port_name: Optional[str] = typer.Argument(None, help="Port whose version should be recorded."),
    all_ports: bool = typer.Option(
        False,
        f"--{OPTION_ALL}",
        help="Process versions for all ports.",
    ),
    overwrite_version: Optional[bool] = typer.Option(
        None,
        f"--{OPTION_OVERWRITE_VERSION}/--no-{OPTION_OVERWRITE_VERSION}",
        help="Overwrite `git-tree` of an existing version.",
    ),
    skip_formatting_check: Optional[bool] = typer.Option(
        None,
        f"--{OPTION_SKIP_FORMATTING_CHECK}/--no-{OPTION_SKIP_FORMATTING_CHECK}",
        help="Skips the formatting check of vcpkg.json files.",
    ),
    skip_version_format_check: Optional[bool] = typer.Option(
        None,
        f"--{OPTION_SKIP_VERSION_FORMAT_CHECK}/--no-{OPTION_SKIP_VERSION_FORMAT_CHECK}",
        help="Skips the version format check.",
    ),
    verbose: Optional[bool] = typer.Option(
        None,
        f"--{OPTION_VERBOSE}/--no-{OPTION_VERBOSE}",
        help="Print success messages instead of just errors.",
    ),
    root: Optional[Path] = typer.Option(None, "--root", help="Registry root (default: $PORTLEDGER_ROOT or .)."),
    config: Optional[Path] = typer.Option(None, "--config"),
    summary_json: Optional[Path] = typer.Option(
        None,
        "--summary-json",
        help="Write the per-port run summary as JSON.",
    ),
) -> None:
    """Record the current version of one port (or every port) in the version ledger."""
    paths = _registry_paths(root, config)
    flags = merge_payload(
        {
            "overwrite_version": overwrite_version,
            "skip_formatting_check": skip_formatting_check,
            "skip_version_format_check": skip_version_format_check,
            "verbose": verbose,
        },
        add_version_defaults(root=paths.root, config_path=config),
    )
    verbose_flag = flags.get("verbose")
    options = AddVersionOptions(
        port_name=port_name,
        all_ports=all_ports,
        overwrite_version=bool(flags.get("overwrite_version", False)),
        skip_formatting_check=bool(flags.get("skip_formatting_check", False)),
        skip_version_format_check=bool(flags.get("skip_version_format_check", False)),
        verbose=None if verbose_flag is None else bool(verbose_flag),
    )
    deps = _context_deps_factory(ctx)(paths)
    try:
        summary = run_add_version(options, paths=paths, deps=deps)
    except UsageError as exc:
        deps.error(exc.render())
        raise typer.Exit(code=_USAGE_EXIT) from exc
    except LedgerError as exc:
        deps.error(exc.render())
        raise typer.Exit(code=_FAILURE_EXIT) from exc
    if summary_json is not None:
        _write_summary(summary_json, summary)
    raise typer.Exit(code=summary.exit_code)


@app.command(FORMAT_MANIFEST_COMMAND)
def format_manifest_command(
    port_names: List[str] = typer.Argument(..., help="Ports whose vcpkg.json should be rewritten."),
    root: Optional[Path] = typer.Option(None, "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """Rewrite port manifests in the canonical form the formatting check expects."""
    paths = _registry_paths(root, config)
    exit_code = 0
    for port_name in port_names:
        manifest_path = paths.manifest_path(port_name)
        try:
            changed = format_manifest(paths, port_name)
        except LedgerError as exc:
            _echo_error(exc.render())
            exit_code = _FAILURE_EXIT
            continue
        if changed:
            _echo_success(f"formatted {manifest_path}")
        else:
            typer.echo(f"{manifest_path} is already formatted")
    raise typer.Exit(code=exit_code)
