"""Task orchestration for the orchestrating (short-lived) process.

Registers the wrapper task and starts it, then hands ownership to the OS
scheduler. Scheduler failures are written to ``scheduler_error.txt`` in the
case folder instead of the audit log, which belongs to the detached task.
"""

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from triagekit.core import logging
from triagekit.core.environment import local_now
from triagekit.core.errors import SchedulerError
from triagekit.models.task import TaskDescriptor
from triagekit.scheduler.backend import SchedulerBackend, SchtasksBackend


@dataclass
class OrchestrationResult:
    """Outcome of registering and starting one task."""

    task_name: str
    start_at: datetime
    registered: bool
    started: bool
    errors: list[str] = field(default_factory=list)

    def to_json_dict(self) -> dict:
        return {
            "taskName": self.task_name,
            "startAt": self.start_at.isoformat(),
            "registered": self.registered,
            "started": self.started,
            "errors": self.errors,
        }


class TaskOrchestrator:
    """Registers and starts the execution wrapper task."""

    SIDE_CHANNEL_FILE = "scheduler_error.txt"

    def __init__(
        self,
        output_dir: Path,
        backend: SchedulerBackend | None = None,
        clock: Callable[[], datetime] = local_now,
        case_id: str | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            output_dir: Case folder receiving the side-channel file
            backend: Scheduler backend (defaults to schtasks.exe)
            clock: Source of side-channel timestamps
            case_id: Case reference added to side-channel entries
        """
        self.output_dir = Path(output_dir)
        self.backend = backend or SchtasksBackend(self.output_dir)
        self._clock = clock
        self.case_id = case_id
        self._errors: list[str] = []

    @property
    def side_channel_file(self) -> Path:
        return self.output_dir / self.SIDE_CHANNEL_FILE

    def schedule(self, descriptor: TaskDescriptor) -> bool:
        """Register the task. Returns False (and records why) on failure."""
        try:
            self.backend.register(descriptor)
        except SchedulerError as e:
            self._record_failure(e)
            return False
        logging.info("Task registered", task=descriptor.name, start_at=descriptor.start_at.isoformat())
        return True

    def start(self, task_name: str) -> bool:
        """Start the task now. Returns False (and records why) on failure."""
        try:
            self.backend.start(task_name)
        except SchedulerError as e:
            self._record_failure(e)
            return False
        logging.info("Task started", task=task_name)
        return True

    def launch(self, descriptor: TaskDescriptor) -> OrchestrationResult:
        """Register then start the task.

        Start is attempted whatever the registration outcome; the two
        failures are recorded independently.
        """
        self._errors = []
        registered = self.schedule(descriptor)
        started = self.start(descriptor.name)
        return OrchestrationResult(
            task_name=descriptor.name,
            start_at=descriptor.start_at,
            registered=registered,
            started=started,
            errors=list(self._errors),
        )

    def _record_failure(self, err: SchedulerError) -> None:
        message = str(err)
        if self.case_id:
            message = f"{message} (case {self.case_id})"
        self._errors.append(message)
        logging.warning("Scheduler operation failed", detail=message)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(self.side_channel_file, "a", encoding="utf-8") as f:
                f.write(f"{self._clock():%Y-%m-%d %H:%M:%S} - {message}\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            logging.error("Could not write scheduler error file", path=str(self.side_channel_file), error=str(e))
