from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


import pytest

from portledger.registry import RegistryPaths
from tests.registry_helpers import RecordingOutput, write_baseline_payload


@pytest.fixture
def registry(tmp_path: Path) -> RegistryPaths:
    paths = RegistryPaths(root=tmp_path / "registry")
    paths.ports_dir.mkdir(parents=True)
    write_baseline_payload(paths, {})
    return paths


@pytest.fixture
def output() -> RecordingOutput:
    return RecordingOutput()
