"""Record each port's current version in the history files and the baseline.

One run loads the baseline once, walks the targeted ports in listing order,
and for each port runs the history reconciler and then the baseline
reconciler, writing whichever file actually changed. The failure policy is
picked once from the options: a single named port aborts on its first
failure, `--all` records the failure and moves on to the next port.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import os
from pathlib import Path
import subprocess
from typing import Callable, Mapping, MutableMapping

from portledger.baseline import reconcile_baseline
from portledger.command_ids import ADD_VERSION_COMMAND, OPTION_ALL
from portledger.exceptions import (
    FingerprintUnavailable,
    FormatMismatch,
    LedgerError,
    LedgerWriteFailed,
    PortNotFound,
    SchemeSuggestionError,
    missing_target_error,
)
from portledger.git_state import RunCommand, port_git_tree_map, port_has_local_changes
from portledger.history import UpdateResult, reconcile_history
from portledger.ledger_io import (
    ReplaceFn,
    load_baseline,
    load_history,
    write_baseline,
    write_history,
)
from portledger.recipe import (
    PortRecipe,
    load_port_recipe,
    read_manifest_text,
    render_canonical_manifest,
)
from portledger.registry import RegistryPaths
from portledger.scheme_classifier import suggest_scheme
from portledger.versions import Version

Echo = Callable[[str], None]


class FailurePolicy(str, Enum):
    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True)
class AddVersionOptions:
    port_name: str | None = None
    all_ports: bool = False
    overwrite_version: bool = False
    skip_formatting_check: bool = False
    skip_version_format_check: bool = False
    verbose: bool | None = None

    @property
    def failure_policy(self) -> FailurePolicy:
        if self.port_name is None and self.all_ports:
            return FailurePolicy.CONTINUE
        return FailurePolicy.ABORT

    @property
    def verbose_output(self) -> bool:
        if self.verbose is None:
            return self.failure_policy is FailurePolicy.ABORT
        return self.verbose


@dataclass(frozen=True)
class AddVersionDeps:
    port_exists: Callable[[str], bool]
    load_recipe: Callable[[str], PortRecipe]
    read_manifest_text: Callable[[str], str | None]
    render_canonical: Callable[[PortRecipe], str]
    git_tree_map: Callable[[], Mapping[str, str]]
    has_local_changes: Callable[[str], bool | None]
    list_ports: Callable[[], list[str]]
    echo: Echo
    warn: Echo
    error: Echo
    replace_fn: ReplaceFn = os.replace


def _port_dir_exists(paths: RegistryPaths, port_name: str) -> bool:
    if not port_name or port_name in {".", ".."} or "/" in port_name or "\\" in port_name:
        return False
    return paths.port_dir(port_name).is_dir()


def default_deps(
    paths: RegistryPaths,
    *,
    echo: Echo,
    warn: Echo,
    error: Echo,
    run: RunCommand = subprocess.run,
) -> AddVersionDeps:
    return AddVersionDeps(
        port_exists=lambda port_name: _port_dir_exists(paths, port_name),
        load_recipe=lambda port_name: load_port_recipe(paths, port_name),
        read_manifest_text=lambda port_name: read_manifest_text(paths, port_name),
        render_canonical=render_canonical_manifest,
        git_tree_map=lambda: port_git_tree_map(paths, run=run),
        has_local_changes=lambda port_name: port_has_local_changes(paths, port_name, run=run),
        list_ports=paths.list_ports,
        echo=echo,
        warn=warn,
        error=error,
    )


@dataclass(frozen=True)
class PortOutcome:
    port_name: str
    version: Version | None = None
    history_result: UpdateResult = UpdateResult.NOT_UPDATED
    baseline_result: UpdateResult = UpdateResult.NOT_UPDATED
    error: LedgerError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def updated(self) -> bool:
        return UpdateResult.UPDATED in (self.history_result, self.baseline_result)

    def to_payload(self) -> dict[str, object]:
        return {
            "port": self.port_name,
            "version": str(self.version) if self.version is not None else None,
            "history": self.history_result.value,
            "baseline": self.baseline_result.value,
            "error": self.error.to_payload() if self.error is not None else None,
        }


@dataclass(frozen=True)
class RunSummary:
    policy: FailurePolicy
    outcomes: tuple[PortOutcome, ...] = ()
    aborted: bool = False

    @property
    def failed_ports(self) -> list[str]:
        return [outcome.port_name for outcome in self.outcomes if outcome.failed]

    @property
    def updated_ports(self) -> list[str]:
        return [outcome.port_name for outcome in self.outcomes if outcome.updated]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed_ports else 0

    def to_payload(self) -> dict[str, object]:
        return {
            "policy": self.policy.value,
            "aborted": self.aborted,
            "exit_code": self.exit_code,
            "processed": len(self.outcomes),
            "updated_ports": self.updated_ports,
            "failed_ports": self.failed_ports,
            "ports": [outcome.to_payload() for outcome in self.outcomes],
        }


@dataclass
class _RunContext:
    options: AddVersionOptions
    paths: RegistryPaths
    deps: AddVersionDeps
    baseline: MutableMapping[str, Version]
    git_trees: Mapping[str, str]
    verbose: bool = False
    outcomes: list[PortOutcome] = field(default_factory=list)


def resolve_targets(options: AddVersionOptions, deps: AddVersionDeps) -> list[str]:
    if options.port_name is not None:
        if options.all_ports:
            deps.warn(f"ignoring --{OPTION_ALL} since a port name argument was provided")
        return [options.port_name]
    if not options.all_ports:
        raise missing_target_error(ADD_VERSION_COMMAND)
    return list(deps.list_ports())


def _check_manifest_format(
    port_name: str,
    recipe: PortRecipe,
    context: _RunContext,
) -> None:
    current = context.deps.read_manifest_text(port_name)
    if current is None:
        return
    if current != context.deps.render_canonical(recipe):
        raise FormatMismatch(port_name, context.paths.manifest_path(port_name))


def _write_or_fail(path: Path, port_name: str, write: Callable[[], None]) -> None:
    try:
        write()
    except OSError as exc:
        raise LedgerWriteFailed(path, str(exc), port_name=port_name) from exc


def _update_port(port_name: str, context: _RunContext) -> PortOutcome:
    options = context.options
    deps = context.deps
    if not deps.port_exists(port_name):
        raise PortNotFound(port_name)
    recipe = deps.load_recipe(port_name)
    if not options.skip_formatting_check:
        _check_manifest_format(port_name, recipe, context)
    if deps.has_local_changes(port_name):
        deps.warn(f"there are uncommitted changes for {port_name}")

    git_tree = context.git_trees.get(port_name)
    if git_tree is None:
        raise FingerprintUnavailable(port_name)

    schemed = recipe.version
    history_path = context.paths.history_path(port_name)
    history = load_history(history_path, port_name=port_name)
    reconciliation = reconcile_history(
        history,
        port_name=port_name,
        version=schemed,
        git_tree=git_tree,
        overwrite_version=options.overwrite_version,
    )
    if reconciliation.issue is not None:
        return PortOutcome(port_name=port_name, version=schemed.version, error=reconciliation.issue)

    if reconciliation.updated:
        if not options.skip_version_format_check:
            suggestion = suggest_scheme(schemed)
            if suggestion is not None:
                return PortOutcome(
                    port_name=port_name,
                    version=schemed.version,
                    error=SchemeSuggestionError(
                        port_name,
                        current_field=suggestion.current.field_name,
                        suggested_field=suggestion.suggested.field_name,
                    ),
                )
        _write_or_fail(
            history_path,
            port_name,
            lambda: write_history(history_path, reconciliation.entries, replace_fn=deps.replace_fn),
        )
        if context.verbose:
            suffix = " (new file)" if reconciliation.new_file else ""
            deps.echo(f"added version {schemed.version} to {history_path}{suffix}")
    elif context.verbose:
        deps.echo(f"version {schemed.version} is already in {history_path}")

    baseline_path = context.paths.baseline_path
    baseline_result = reconcile_baseline(
        context.baseline,
        port_name=port_name,
        version=schemed.version,
    )
    if baseline_result is UpdateResult.UPDATED:
        _write_or_fail(
            baseline_path,
            port_name,
            lambda: write_baseline(baseline_path, context.baseline, replace_fn=deps.replace_fn),
        )
        if context.verbose:
            deps.echo(f"added version {schemed.version} to {baseline_path}")
    elif context.verbose:
        deps.echo(f"version {schemed.version} is already in {baseline_path}")

    outcome = PortOutcome(
        port_name=port_name,
        version=schemed.version,
        history_result=reconciliation.result,
        baseline_result=baseline_result,
    )
    if context.verbose and not outcome.updated:
        deps.echo(f"No files were updated for {port_name}")
    return outcome


def process_port(port_name: str, context: _RunContext) -> PortOutcome:
    try:
        return _update_port(port_name, context)
    except LedgerError as exc:
        return PortOutcome(port_name=port_name, error=exc)


def run_add_version(
    options: AddVersionOptions,
    *,
    paths: RegistryPaths,
    deps: AddVersionDeps,
) -> RunSummary:
    """Run the add-version flow; precondition failures raise `LedgerError`."""
    policy = options.failure_policy
    baseline = load_baseline(paths.baseline_path)
    targets = resolve_targets(options, deps)
    context = _RunContext(
        options=options,
        paths=paths,
        deps=deps,
        baseline=baseline,
        git_trees=deps.git_tree_map(),
        verbose=options.verbose_output,
    )
    for port_name in targets:
        outcome = process_port(port_name, context)
        context.outcomes.append(outcome)
        if outcome.error is None:
            continue
        deps.error(outcome.error.render())
        if policy is FailurePolicy.ABORT:
            return RunSummary(policy=policy, outcomes=tuple(context.outcomes), aborted=True)

    summary = RunSummary(policy=policy, outcomes=tuple(context.outcomes))
    if policy is FailurePolicy.CONTINUE:
        deps.echo(
            f"processed {len(summary.outcomes)} ports: "
            f"{len(summary.updated_ports)} updated, {len(summary.failed_ports)} failed"
        )
    return summary
