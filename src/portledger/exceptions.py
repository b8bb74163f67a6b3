"""Reportable failures raised or returned by the version ledger."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from portledger.command_ids import (
    CLI_NAME,
    FORMAT_MANIFEST_COMMAND,
    OPTION_ALL,
    OPTION_OVERWRITE_VERSION,
    OPTION_SKIP_VERSION_FORMAT_CHECK,
)

if TYPE_CHECKING:
    from portledger.versions import Version

NO_FILES_UPDATED = "***No files were updated***"
COMMIT_CHANGES_REMINDER = "Did you remember to commit your changes?"


class LedgerError(RuntimeError):
    """Base class for every failure the ledger reports to the user.

    Instances carry the port they concern (if any), a list of detail lines
    with the conflicting values, and a remediation hint. They are raised at
    file boundaries and returned as values from the reconcilers; the
    orchestrator decides whether one halts the run.
    """

    kind = "ledger_error"

    def __init__(
        self,
        message: str,
        *,
        port_name: str | None = None,
        details: tuple[str, ...] = (),
        remediation: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.port_name = port_name
        self.details = details
        self.remediation = remediation

    def render(self) -> str:
        lines = [self.message, *self.details]
        if self.remediation:
            lines.append(self.remediation)
        return "\n".join(lines)

    def to_payload(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "port": self.port_name,
            "message": self.message,
            "details": list(self.details),
            "remediation": self.remediation,
        }


class UsageError(LedgerError):
    kind = "usage_error"


class PreconditionMissing(LedgerError):
    kind = "precondition_missing"

    def __init__(self, path: Path) -> None:
        super().__init__(f"couldn't find required file {path}")
        self.path = path


class MalformedLedgerFile(LedgerError):
    kind = "malformed_ledger_file"

    def __init__(self, path: Path, reason: str, *, port_name: str | None = None) -> None:
        super().__init__(
            f"unable to parse versions file {path}",
            port_name=port_name,
            details=(reason,),
        )
        self.path = path
        self.reason = reason


class LedgerWriteFailed(LedgerError):
    kind = "ledger_write_failed"

    def __init__(self, path: Path, reason: str, *, port_name: str | None = None) -> None:
        super().__init__(
            f"unable to write {path}",
            port_name=port_name,
            details=(reason,),
            remediation=f"Check that {path.parent} is writable, then rerun the command.",
        )
        self.path = path
        self.reason = reason


class PortNotFound(LedgerError):
    kind = "port_not_found"

    def __init__(self, port_name: str) -> None:
        super().__init__(f"{port_name} does not exist", port_name=port_name)


class RecipeLoadFailed(LedgerError):
    kind = "recipe_load_failed"

    def __init__(self, port_name: str, reason: str) -> None:
        super().__init__(
            f"can't load port {port_name}",
            port_name=port_name,
            details=(reason,),
        )
        self.reason = reason


class FormatMismatch(LedgerError):
    kind = "format_mismatch"

    def __init__(self, port_name: str, manifest_path: Path) -> None:
        super().__init__(
            f"{port_name} is not properly formatted",
            port_name=port_name,
            details=(f"manifest: {manifest_path}",),
            remediation=(
                f"Run `{CLI_NAME} {FORMAT_MANIFEST_COMMAND} {port_name}` to format the file\n"
                "Don't forget to commit the result!"
            ),
        )
        self.manifest_path = manifest_path


class FingerprintUnavailable(LedgerError):
    kind = "fingerprint_unavailable"

    def __init__(self, port_name: str) -> None:
        super().__init__(
            f"can't obtain SHA for port {port_name}",
            port_name=port_name,
            details=(f"-- {COMMIT_CHANGES_REMINDER}",),
            remediation=NO_FILES_UPDATED,
        )


class ContentUnchangedVersionChanged(LedgerError):
    kind = "content_unchanged_version_changed"

    def __init__(
        self,
        port_name: str,
        *,
        recorded_version: Version,
        requested_version: Version,
        git_tree: str,
    ) -> None:
        super().__init__(
            f"checked-in files for {port_name} are unchanged from version {recorded_version}",
            port_name=port_name,
            details=(
                f"-- requested version: {requested_version}",
                f"-- SHA: {git_tree}",
                f"-- {COMMIT_CHANGES_REMINDER}",
            ),
            remediation=NO_FILES_UPDATED,
        )
        self.recorded_version = recorded_version
        self.requested_version = requested_version
        self.git_tree = git_tree


class VersionConflict(LedgerError):
    kind = "version_conflict"

    def __init__(
        self,
        port_name: str,
        *,
        version: Version,
        old_git_tree: str,
        new_git_tree: str,
    ) -> None:
        super().__init__(
            f"checked-in files for {port_name} have changed but the version was not updated",
            port_name=port_name,
            details=(
                f"version: {version}",
                f"old SHA: {old_git_tree}",
                f"new SHA: {new_git_tree}",
                "Did you remember to update the version or port version?",
            ),
            remediation=(
                f"Use --{OPTION_OVERWRITE_VERSION} to bypass this check\n{NO_FILES_UPDATED}"
            ),
        )
        self.version = version
        self.old_git_tree = old_git_tree
        self.new_git_tree = new_git_tree


class SchemeSuggestionError(LedgerError):
    kind = "scheme_suggestion"

    def __init__(self, port_name: str, *, current_field: str, suggested_field: str) -> None:
        super().__init__(
            f'Use the version scheme "{suggested_field}" instead of '
            f'"{current_field}" in port "{port_name}".',
            port_name=port_name,
            remediation=f"Use --{OPTION_SKIP_VERSION_FORMAT_CHECK} to disable this check.",
        )
        self.current_field = current_field
        self.suggested_field = suggested_field


def missing_target_error(command_name: str) -> UsageError:
    return UsageError(
        f"{command_name} with no arguments requires passing --{OPTION_ALL} "
        "to update all port versions at once"
    )
