import subprocess
import xml.etree.ElementTree as ET
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from triagekit.config import AcquisitionSettings
from triagekit.core.errors import SchedulerError
from triagekit.models.custody import CaseMetadata
from triagekit.models.task import TaskDescriptor
from triagekit.scheduler.backend import SchedulerBackend, SchtasksBackend
from triagekit.scheduler.orchestrator import TaskOrchestrator
from triagekit.scheduler.task import build_task_descriptor, new_task_name

NOW = datetime(2025, 1, 1, 12, 10, 0, tzinfo=UTC)
NS = {"t": "http://schemas.microsoft.com/windows/2004/02/mit/task"}


class FakeBackend(SchedulerBackend):
    def __init__(self, fail_register: bool = False, fail_start: bool = False) -> None:
        self.fail_register = fail_register
        self.fail_start = fail_start
        self.registered: list[str] = []
        self.started: list[str] = []

    def register(self, descriptor: TaskDescriptor) -> None:
        if self.fail_register:
            raise SchedulerError("Register", descriptor.name, "Access is denied.")
        self.registered.append(descriptor.name)

    def start(self, task_name: str) -> None:
        if self.fail_start:
            raise SchedulerError("Start", task_name, "The system cannot find the file specified.")
        self.started.append(task_name)


@pytest.fixture
def descriptor(tmp_path: Path, metadata: CaseMetadata) -> TaskDescriptor:
    return build_task_descriptor(
        "KapeTriage-abc",
        tmp_path / "wrapper.json",
        metadata,
        AcquisitionSettings(python_executable="C:\\Python312\\python.exe"),
        NOW,
    )


def test_descriptor_triggers_after_delay(descriptor: TaskDescriptor, tmp_path: Path) -> None:
    assert descriptor.start_at == NOW + timedelta(seconds=60)
    assert descriptor.executable == "C:\\Python312\\python.exe"
    assert descriptor.arguments == [
        "-m",
        "triagekit.cli.main",
        "--log-file",
        str(tmp_path / "wrapper.log"),
        "run-task",
        "--params",
        str(tmp_path / "wrapper.json"),
    ]
    assert descriptor.principal == "SYSTEM"
    assert "CASE-42" in descriptor.description


def test_task_names_are_unique() -> None:
    names = {new_task_name("KapeTriage") for _ in range(50)}

    assert len(names) == 50
    assert all(name.startswith("KapeTriage-") for name in names)


def test_descriptor_xml(descriptor: TaskDescriptor) -> None:
    root = ET.fromstring(descriptor.to_xml())

    assert root.find("t:Principals/t:Principal/t:UserId", NS).text == "S-1-5-18"
    assert root.find("t:Principals/t:Principal/t:RunLevel", NS).text == "HighestAvailable"
    assert root.find("t:Triggers/t:TimeTrigger/t:StartBoundary", NS).text == (
        (NOW + timedelta(seconds=60)).astimezone().strftime("%Y-%m-%dT%H:%M:%S")
    )
    assert root.find("t:Actions/t:Exec/t:Command", NS).text == "C:\\Python312\\python.exe"
    assert "run-task" in root.find("t:Actions/t:Exec/t:Arguments", NS).text
    assert root.find("t:Settings/t:ExecutionTimeLimit", NS).text == "PT0S"


def test_launch_success_leaves_no_side_channel(tmp_path: Path, descriptor: TaskDescriptor) -> None:
    backend = FakeBackend()
    orchestrator = TaskOrchestrator(tmp_path, backend=backend, case_id="CASE-42")

    result = orchestrator.launch(descriptor)

    assert result.registered and result.started
    assert backend.registered == backend.started == ["KapeTriage-abc"]
    assert not (tmp_path / "scheduler_error.txt").exists()


def test_start_attempted_after_failed_registration(tmp_path: Path, descriptor: TaskDescriptor) -> None:
    backend = FakeBackend(fail_register=True)
    orchestrator = TaskOrchestrator(tmp_path, backend=backend, case_id="CASE-42")

    result = orchestrator.launch(descriptor)

    assert not result.registered
    assert result.started
    assert backend.started == ["KapeTriage-abc"]
    lines = (tmp_path / "scheduler_error.txt").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert "Register failed for task KapeTriage-abc" in lines[0]
    assert "CASE-42" in lines[0]


def test_both_failures_recorded_without_touching_audit_log(
    tmp_path: Path, descriptor: TaskDescriptor
) -> None:
    orchestrator = TaskOrchestrator(
        tmp_path, backend=FakeBackend(fail_register=True, fail_start=True)
    )

    result = orchestrator.launch(descriptor)

    assert not result.registered and not result.started
    assert len(result.errors) == 2
    lines = (tmp_path / "scheduler_error.txt").read_text(encoding="utf-8").splitlines()
    assert lines[0].endswith("Register failed for task KapeTriage-abc: Access is denied.")
    assert "Start failed" in lines[1]
    assert not (tmp_path / "runlog.txt").exists()
    assert not (tmp_path / "runlog.json").exists()


def test_schtasks_backend_commands(
    tmp_path: Path, descriptor: TaskDescriptor, monkeypatch: pytest.MonkeyPatch
) -> None:
    commands = []

    def fake_run(command, **kwargs):
        commands.append(command)
        return subprocess.CompletedProcess(command, 0, stdout="SUCCESS", stderr="")

    monkeypatch.setattr("triagekit.scheduler.backend.subprocess.run", fake_run)
    backend = SchtasksBackend(tmp_path)

    backend.register(descriptor)
    backend.start(descriptor.name)

    xml_path = tmp_path / "KapeTriage-abc.xml"
    assert commands[0] == ["schtasks.exe", "/Create", "/TN", "KapeTriage-abc", "/XML", str(xml_path)]
    assert "/F" not in commands[0]
    assert commands[1] == ["schtasks.exe", "/Run", "/TN", "KapeTriage-abc"]
    assert "<UserId>S-1-5-18</UserId>" in xml_path.read_text(encoding="utf-16")


def test_schtasks_backend_failure_raises(
    tmp_path: Path, descriptor: TaskDescriptor, monkeypatch: pytest.MonkeyPatch
) -> None:
    def fake_run(command, **kwargs):
        return subprocess.CompletedProcess(command, 1, stdout="", stderr="ERROR: Access is denied.")

    monkeypatch.setattr("triagekit.scheduler.backend.subprocess.run", fake_run)

    with pytest.raises(SchedulerError, match="Access is denied"):
        SchtasksBackend(tmp_path).start(descriptor.name)


def test_schtasks_missing_binary_raises(tmp_path: Path, descriptor: TaskDescriptor) -> None:
    backend = SchtasksBackend(tmp_path, schtasks=str(tmp_path / "no-such-schtasks.exe"))

    with pytest.raises(SchedulerError):
        backend.start(descriptor.name)
