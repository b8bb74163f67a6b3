from __future__ import annotations

# Command and switch names shared by the CLI and the remediation hints.
ADD_VERSION_COMMAND = "add-version"
FORMAT_MANIFEST_COMMAND = "format-manifest"
CLI_NAME = "portledger"

OPTION_ALL = "all"
OPTION_OVERWRITE_VERSION = "overwrite-version"
OPTION_SKIP_FORMATTING_CHECK = "skip-formatting-check"
OPTION_SKIP_VERSION_FORMAT_CHECK = "skip-version-format-check"
OPTION_VERBOSE = "verbose"
