from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from portledger.json_types import JSONObject, JSONValue

PORT_VERSION_FIELD = "port-version"


class VersionScheme(str, Enum):
    RELAXED = "relaxed"
    SEMVER = "semver"
    DATE = "date"
    STRING = "string"

    @property
    def field_name(self) -> str:
        return _SCHEME_FIELDS[self]

    @classmethod
    def from_field(cls, field_name: str) -> "VersionScheme":
        for scheme, name in _SCHEME_FIELDS.items():
            if name == field_name:
                return scheme
        raise ValueError(f"unknown version field {field_name!r}")


_SCHEME_FIELDS: dict[VersionScheme, str] = {
    VersionScheme.RELAXED: "version",
    VersionScheme.SEMVER: "version-semver",
    VersionScheme.DATE: "version-date",
    VersionScheme.STRING: "version-string",
}

VERSION_FIELDS: tuple[str, ...] = tuple(_SCHEME_FIELDS.values())


@dataclass(frozen=True)
class Version:
    """A version text plus the recipe revision ("port-version").

    The text is opaque: it is compared for exact equality only.
    """

    text: str
    port_version: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise TypeError(f"version text must be a string, got {type(self.text).__name__}")
        if type(self.port_version) is not int or self.port_version < 0:
            raise ValueError(f"port-version must be a non-negative integer, got {self.port_version!r}")

    def __str__(self) -> str:
        if self.port_version:
            return f"{self.text}#{self.port_version}"
        return self.text


@dataclass(frozen=True)
class SchemedVersion:
    scheme: VersionScheme
    version: Version

    @property
    def field_name(self) -> str:
        return self.scheme.field_name

    def __str__(self) -> str:
        return str(self.version)


def encode_version(version: Version, field_name: str) -> JSONObject:
    return {field_name: version.text, PORT_VERSION_FIELD: version.port_version}


def encode_schemed_version(schemed: SchemedVersion) -> JSONObject:
    return encode_version(schemed.version, schemed.field_name)


def decode_port_version(payload: Mapping[str, JSONValue]) -> int:
    raw = payload.get(PORT_VERSION_FIELD, 0)
    if type(raw) is not int or raw < 0:
        raise ValueError(f"{PORT_VERSION_FIELD} must be a non-negative integer, got {raw!r}")
    return raw


def decode_schemed_version(payload: Mapping[str, JSONValue]) -> SchemedVersion:
    present = [name for name in VERSION_FIELDS if name in payload]
    if not present:
        raise ValueError(f"expected one of {', '.join(VERSION_FIELDS)}")
    if len(present) > 1:
        raise ValueError(f"conflicting version fields: {', '.join(present)}")
    field_name = present[0]
    text = payload[field_name]
    if not isinstance(text, str):
        raise ValueError(f"{field_name} must be a string, got {text!r}")
    return SchemedVersion(
        scheme=VersionScheme.from_field(field_name),
        version=Version(text, decode_port_version(payload)),
    )
