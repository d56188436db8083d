import json
import sys
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from triagekit.audit.log import AuditLog
from triagekit.core.errors import CollectorExecutionError
from triagekit.models.task import WrapperParameters
from triagekit.wrapper.execution import (
    ExecutionWrapper,
    WrapperState,
    format_duration,
    run_collector,
)

STARTED = datetime(2025, 1, 1, 12, 10, 0, tzinfo=UTC)
ENDED = datetime(2025, 1, 1, 12, 15, 30, tzinfo=UTC)


def stepping_clock(*times: datetime) -> Callable[[], datetime]:
    it = iter(times)
    return lambda: next(it)


def _records(params: WrapperParameters) -> list[dict]:
    return json.loads((Path(params.output_path) / "runlog.json").read_text(encoding="utf-8"))


def test_successful_run_logs_start_and_end(params: WrapperParameters) -> None:
    calls = []

    def runner(path: str, args: list[str]) -> int:
        calls.append((path, args))
        return 0

    wrapper = ExecutionWrapper(params, runner=runner, clock=stepping_clock(STARTED, ENDED))
    state = wrapper.run()

    assert state == WrapperState.COMPLETED
    assert calls == [(params.collector_path, params.collector_args)]

    start, end = _records(params)
    assert start["event"] == "start"
    assert end["event"] == "end"
    assert end["exitCode"] == 0
    custody = end["chainOfCustody"]
    assert datetime.fromisoformat(custody["AcquisitionEndUtc"]) > datetime.fromisoformat(
        custody["AcquisitionStartUtc"]
    )
    assert custody["CaseId"] == "CASE-42"
    assert custody["IncidentId"] == "INC-7"
    assert custody["ScriptVersion"]


def test_duration_is_recorded(params: WrapperParameters) -> None:
    wrapper = ExecutionWrapper(params, runner=lambda p, a: 0, clock=stepping_clock(STARTED, ENDED))
    wrapper.run()

    end = _records(params)[-1]
    assert end["duration"] == "00:05:30"
    assert end["durationSeconds"] == 330.0


def test_nonzero_exit_code_is_not_a_failure(params: WrapperParameters) -> None:
    wrapper = ExecutionWrapper(params, runner=lambda p, a: 2, clock=stepping_clock(STARTED, ENDED))

    assert wrapper.run() == WrapperState.COMPLETED
    assert wrapper.exit_code == 2
    assert _records(params)[-1]["exitCode"] == 2


def test_collector_exception_logs_single_error(params: WrapperParameters) -> None:
    def runner(path: str, args: list[str]) -> int:
        raise RuntimeError("media removed")

    wrapper = ExecutionWrapper(params, runner=runner, clock=stepping_clock(STARTED, ENDED))
    state = wrapper.run()

    assert state == WrapperState.FAILED
    records = _records(params)
    assert [r["event"] for r in records] == ["start", "error"]
    error = records[1]
    assert error["message"] == "media removed"
    assert "RuntimeError" in error["stack"]
    assert error["caseId"] == "CASE-42"
    assert error["incidentId"] == "INC-7"
    assert error["taskName"] == "KapeTriage-test"

    text = (Path(params.output_path) / "runlog.txt").read_text(encoding="utf-8")
    assert "ERROR: media removed" in text


def test_missing_collector_fails_through_default_runner(params: WrapperParameters) -> None:
    wrapper = ExecutionWrapper(params, clock=stepping_clock(STARTED, ENDED))

    assert wrapper.run() == WrapperState.FAILED
    error = _records(params)[-1]
    assert error["event"] == "error"
    assert "Failed to run" in error["message"]


def test_wrapper_runs_only_once(params: WrapperParameters) -> None:
    wrapper = ExecutionWrapper(params, runner=lambda p, a: 0, clock=stepping_clock(STARTED, ENDED))
    wrapper.run()

    with pytest.raises(RuntimeError):
        wrapper.run()
    assert len(_records(params)) == 2


def test_start_is_written_before_collector_runs(params: WrapperParameters) -> None:
    seen = []

    def runner(path: str, args: list[str]) -> int:
        seen.extend(r["event"] for r in _records(params))
        return 0

    ExecutionWrapper(params, runner=runner, clock=stepping_clock(STARTED, ENDED)).run()

    assert seen == ["start"]


def test_clock_stepping_backwards_still_completes(params: WrapperParameters) -> None:
    stepped_back = STARTED - timedelta(seconds=1)
    wrapper = ExecutionWrapper(params, runner=lambda p, a: 0, clock=stepping_clock(STARTED, stepped_back))

    assert wrapper.run() == WrapperState.COMPLETED

    records = _records(params)
    assert [r["event"] for r in records] == ["start", "end"]
    assert records[-1]["duration"] == "00:00:00"
    assert records[-1]["durationSeconds"] == 0.0
    assert records[-1]["exitCode"] == 0


def test_unrecordable_end_becomes_error(params: WrapperParameters) -> None:
    wrapper = ExecutionWrapper(
        params,
        runner=lambda p, a: "not-an-exit-code",
        clock=stepping_clock(STARTED, ENDED, ENDED),
    )

    assert wrapper.run() == WrapperState.FAILED
    assert wrapper.exit_code is None
    assert [r["event"] for r in _records(params)] == ["start", "error"]


class _FullDiskLog(AuditLog):
    def append_record(self, event) -> None:
        if getattr(event, "event", None) != "start":
            raise OSError(28, "No space left on device")
        super().append_record(event)


def test_run_does_not_raise_when_outcome_cannot_be_written(params: WrapperParameters) -> None:
    wrapper = ExecutionWrapper(
        params,
        audit_log=_FullDiskLog(Path(params.output_path)),
        runner=lambda p, a: 0,
        clock=stepping_clock(STARTED, ENDED, ENDED),
    )

    assert wrapper.run() == WrapperState.FAILED
    assert [r["event"] for r in _records(params)] == ["start"]


def test_run_collector_returns_exit_code() -> None:
    assert run_collector(sys.executable, ["-c", "import sys; sys.exit(3)"]) == 3


def test_run_collector_wraps_launch_errors(tmp_path: Path) -> None:
    with pytest.raises(CollectorExecutionError):
        run_collector(str(tmp_path / "nope" / "kape.exe"), [])


def test_format_duration() -> None:
    assert format_duration(timedelta(minutes=5, seconds=30)) == "00:05:30"
    assert format_duration(timedelta(hours=26, seconds=1)) == "26:00:01"
