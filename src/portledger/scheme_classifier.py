from __future__ import annotations

from dataclasses import dataclass
import re

from portledger.versions import SchemedVersion, VersionScheme

_NUMERIC_ID = r"(?:0|[1-9][0-9]*)"
_TAG_ID = r"[0-9A-Za-z-]+"
_TAG_LIST = rf"{_TAG_ID}(?:\.{_TAG_ID})*"

_DATE_VERSION_RE = re.compile(
    rf"^[0-9]{{4}}-[0-9]{{2}}-[0-9]{{2}}(?:\.{_NUMERIC_ID})*$"
)
_RELAXED_DOT_VERSION_RE = re.compile(
    rf"^{_NUMERIC_ID}(?:\.{_NUMERIC_ID})*(?:-{_TAG_LIST})?(?:\+{_TAG_LIST})?$"
)


@dataclass(frozen=True)
class SchemeSuggestion:
    current: VersionScheme
    suggested: VersionScheme


def is_date_version(text: str) -> bool:
    """`YYYY-MM-DD` optionally followed by `.N` disambiguators."""
    return _DATE_VERSION_RE.match(text) is not None


def is_relaxed_dot_version(text: str) -> bool:
    """Dotted non-negative integers with optional `-pre` and `+build` tags."""
    return _RELAXED_DOT_VERSION_RE.match(text) is not None


def suggest_scheme(schemed: SchemedVersion) -> SchemeSuggestion | None:
    # Only the opaque fallback scheme can be upgraded; date shapes win.
    if schemed.scheme is not VersionScheme.STRING:
        return None
    text = schemed.version.text
    if is_date_version(text):
        return SchemeSuggestion(current=schemed.scheme, suggested=VersionScheme.DATE)
    if is_relaxed_dot_version(text):
        return SchemeSuggestion(current=schemed.scheme, suggested=VersionScheme.RELAXED)
    return None
