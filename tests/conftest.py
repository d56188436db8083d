from datetime import UTC, datetime
from pathlib import Path

import pytest

from triagekit.core.environment import EnvironmentContext
from triagekit.models.custody import CaseMetadata
from triagekit.models.task import WrapperParameters

FIXED_NOW = datetime(2025, 1, 1, 12, 10, 0, tzinfo=UTC)


@pytest.fixture
def env(tmp_path: Path) -> EnvironmentContext:
    return EnvironmentContext(
        hostname="HOST1",
        username="analyst",
        domain="CORP",
        media_root=tmp_path,
        elevated=True,
        clock=lambda: FIXED_NOW,
    )


@pytest.fixture
def metadata() -> CaseMetadata:
    return CaseMetadata(
        case_id="CASE-42",
        incident_id="INC-7",
        operator_name="analyst",
        operator_id="CORP\\analyst",
        authorisation_ref="WARRANT-1",
        evidence_device_id="E:",
        hostname="HOST1",
        notes="",
    )


@pytest.fixture
def params(tmp_path: Path, metadata: CaseMetadata) -> WrapperParameters:
    output_dir = tmp_path / "CASE-20250101-1210-HOST1"
    output_dir.mkdir()
    return WrapperParameters(
        collector_path=str(tmp_path / "kape.exe"),
        collector_args=["--tsource", "C:", "--tdest", str(output_dir)],
        output_path=str(output_dir),
        usb_root=str(tmp_path),
        task_name="KapeTriage-test",
        metadata=metadata,
    )
