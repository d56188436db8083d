"""Detached execution wrapper around one collector invocation.

Runs inside the scheduled task, not the process that registered it. The
wrapper records a start event, blocks on the collector, then records exactly
one end or error event. Failures are logged, never retried or re-raised.
"""

import os
import subprocess
import traceback
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from enum import Enum
from pathlib import Path

from triagekit.audit.log import AuditLog
from triagekit.core import logging
from triagekit.core.errors import CollectorExecutionError
from triagekit.models.custody import AcquisitionRecord
from triagekit.models.event import EndEvent, ErrorEvent, StartEvent
from triagekit.models.task import WrapperParameters

CollectorRunner = Callable[[str, list[str]], int]


class WrapperState(str, Enum):
    """Execution wrapper lifecycle."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


def utc_now() -> datetime:
    return datetime.now(UTC)


def format_duration(delta: timedelta) -> str:
    """Format elapsed time as ``HH:MM:SS`` (hours may exceed 24)."""
    total = int(delta.total_seconds())
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def run_collector(collector_path: str, args: list[str], hidden: bool = True) -> int:
    """Run the collector to completion and return its exit code.

    Args:
        collector_path: Collector executable
        args: Argument vector
        hidden: Suppress any console or window on Windows

    Returns:
        Collector exit code

    Raises:
        CollectorExecutionError: If the process cannot be started
    """
    kwargs: dict = {}
    if hidden and os.name == "nt":
        startupinfo = subprocess.STARTUPINFO()
        startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW
        startupinfo.wShowWindow = 0  # SW_HIDE
        kwargs["startupinfo"] = startupinfo
        kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW

    try:
        process = subprocess.run(
            [collector_path, *args],
            stdin=subprocess.DEVNULL,
            check=False,
            **kwargs,
        )
    except OSError as e:
        raise CollectorExecutionError(collector_path, str(e)) from e

    return process.returncode


class ExecutionWrapper:
    """Runs one collector invocation and records its outcome once."""

    def __init__(
        self,
        params: WrapperParameters,
        audit_log: AuditLog | None = None,
        runner: CollectorRunner | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the wrapper.

        Args:
            params: Run parameters written by the orchestrating process
            audit_log: Log for the case folder (defaults to params.output_path)
            runner: Collector runner (defaults to a hidden subprocess)
            clock: UTC clock for acquisition timestamps
        """
        self.params = params
        self.audit_log = audit_log or AuditLog(
            Path(params.output_path), record_format=params.record_format
        )
        self._runner = runner or run_collector
        self._clock = clock or utc_now
        self._state = WrapperState.IDLE
        self.record: AcquisitionRecord | None = None
        self.exit_code: int | None = None

    @property
    def state(self) -> WrapperState:
        return self._state

    def run(self) -> WrapperState:
        """Run the collector and log start plus end or error.

        Once the start event is written this never raises: a failure while
        recording the end event is recorded as an error event instead.

        Returns:
            Terminal state, COMPLETED or FAILED

        Raises:
            RuntimeError: If this wrapper has already run
        """
        if self._state != WrapperState.IDLE:
            raise RuntimeError(f"Execution wrapper already {self._state.value}")

        started_at = self._begin()

        try:
            exit_code = self._runner(self.params.collector_path, list(self.params.collector_args))
        except Exception as e:
            self._fail(e, traceback.format_exc())
            return self._state

        try:
            self._complete(exit_code, started_at)
        except Exception as e:
            self._fail(e, traceback.format_exc())

        return self._state

    def _begin(self) -> datetime:
        self._state = WrapperState.RUNNING
        started_at = self._clock()
        self.record = AcquisitionRecord.open(self.params.metadata, started_at)

        self.audit_log.append_line(
            f"Starting {self.params.collector_path} for case {self.record.case_id} "
            f"(task {self.params.task_name}, output {self.params.output_path})"
        )
        self.audit_log.append_record(
            StartEvent(
                time=started_at.astimezone(),
                kape=self.params.collector_path,
                system=self.record.hostname,
                output_path=self.params.output_path,
                usb_root=self.params.usb_root,
                task_name=self.params.task_name,
                chain_of_custody=self.record,
            )
        )
        logging.info("Collector started", task=self.params.task_name, case=self.record.case_id)
        return started_at

    def _complete(self, exit_code: int, started_at: datetime) -> None:
        ended_at = self._clock()
        # Wall clock may step backwards (NTP) during a long collection
        elapsed = max(ended_at - started_at, timedelta(0))
        self.record.close(ended_at)

        end_event = EndEvent(
            time=ended_at.astimezone(),
            kape=self.params.collector_path,
            system=self.record.hostname,
            output_path=self.params.output_path,
            usb_root=self.params.usb_root,
            task_name=self.params.task_name,
            exit_code=exit_code,
            duration=format_duration(elapsed),
            duration_seconds=elapsed.total_seconds(),
            chain_of_custody=self.record,
        )
        self.exit_code = exit_code

        self.audit_log.append_line(
            f"{Path(self.params.collector_path).name} finished with exit code {exit_code} "
            f"after {format_duration(elapsed)}"
        )
        self.audit_log.append_record(end_event)
        self._state = WrapperState.COMPLETED
        logging.info("Collector finished", task=self.params.task_name, exit_code=exit_code)

    def _fail(self, err: Exception, stack: str) -> None:
        self._state = WrapperState.FAILED
        metadata = self.params.metadata
        logging.error("Collector failed", task=self.params.task_name, error=str(err))

        try:
            failed_at = self._clock()
            self.audit_log.append_line(
                f"ERROR: {err} (case {metadata.case_id}, task {self.params.task_name})"
            )
            self.audit_log.append_record(
                ErrorEvent(
                    time=failed_at.astimezone(),
                    message=str(err),
                    stack=stack,
                    output_path=self.params.output_path,
                    usb_root=self.params.usb_root,
                    task_name=self.params.task_name,
                    case_id=metadata.case_id,
                    incident_id=metadata.incident_id,
                )
            )
        except Exception as e:
            logging.error(
                "Could not record collector failure",
                task=self.params.task_name,
                output=self.params.output_path,
                error=str(e),
            )
