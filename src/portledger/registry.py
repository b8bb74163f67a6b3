from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_PORTS_DIR = Path("ports")
DEFAULT_VERSIONS_DIR = Path("versions")
BASELINE_FILE_NAME = "baseline.json"
MANIFEST_FILE_NAME = "vcpkg.json"


@dataclass(frozen=True)
class RegistryPaths:
    """Locations of the ports tree and the version ledger under one root."""

    root: Path
    ports_rel: Path = DEFAULT_PORTS_DIR
    versions_rel: Path = DEFAULT_VERSIONS_DIR

    @property
    def ports_dir(self) -> Path:
        return self.root / self.ports_rel

    @property
    def versions_dir(self) -> Path:
        return self.root / self.versions_rel

    @property
    def baseline_path(self) -> Path:
        return self.versions_dir / BASELINE_FILE_NAME

    def port_dir(self, port_name: str) -> Path:
        return self.ports_dir / port_name

    def manifest_path(self, port_name: str) -> Path:
        return self.port_dir(port_name) / MANIFEST_FILE_NAME

    def history_path(self, port_name: str) -> Path:
        # Histories are bucketed by the port's first character: "z-/zlib.json".
        if not port_name:
            raise ValueError("port name must not be empty")
        return self.versions_dir / f"{port_name[0]}-" / f"{port_name}.json"

    def list_ports(self) -> list[str]:
        if not self.ports_dir.is_dir():
            return []
        return sorted(entry.name for entry in self.ports_dir.iterdir() if entry.is_dir())
