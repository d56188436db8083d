"""OS task scheduler backends."""

import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from triagekit.core import logging
from triagekit.core.errors import SchedulerError
from triagekit.models.task import TaskDescriptor


class SchedulerBackend(ABC):
    """Registers and starts one-shot tasks with the OS scheduler."""

    @abstractmethod
    def register(self, descriptor: TaskDescriptor) -> None:
        """Register a task definition.

        Raises:
            SchedulerError: If the scheduler rejects the task
        """
        pass

    @abstractmethod
    def start(self, task_name: str) -> None:
        """Start a registered task immediately.

        Raises:
            SchedulerError: If the task cannot be started
        """
        pass


class SchtasksBackend(SchedulerBackend):
    """Windows Task Scheduler driven through ``schtasks.exe``.

    The task definition is written as UTF-16 XML next to the wrapper
    parameters so the registered task can be audited afterwards.
    """

    def __init__(self, definition_dir: Path, schtasks: str = "schtasks.exe") -> None:
        """Initialize the backend.

        Args:
            definition_dir: Directory receiving ``<task>.xml`` files
            schtasks: Path to schtasks.exe
        """
        self.definition_dir = Path(definition_dir)
        self.schtasks = schtasks

    def definition_path(self, task_name: str) -> Path:
        return self.definition_dir / f"{task_name}.xml"

    def register(self, descriptor: TaskDescriptor) -> None:
        xml_path = self.definition_path(descriptor.name)
        try:
            self.definition_dir.mkdir(parents=True, exist_ok=True)
            with open(xml_path, "w", encoding="utf-16") as f:
                f.write('<?xml version="1.0" encoding="UTF-16"?>\n')
                f.write(descriptor.to_xml())
        except OSError as e:
            raise SchedulerError("Register", descriptor.name, str(e)) from e

        # No /F: an existing task with the same name must fail, not be replaced
        self._run("Register", descriptor.name, ["/Create", "/TN", descriptor.name, "/XML", str(xml_path)])

    def start(self, task_name: str) -> None:
        self._run("Start", task_name, ["/Run", "/TN", task_name])

    def _run(self, operation: str, task_name: str, args: list[str]) -> None:
        command = [self.schtasks, *args]
        logging.debug("Invoking scheduler", command=subprocess.list2cmdline(command))

        kwargs: dict = {}
        if os.name == "nt":
            kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                **kwargs,
            )
        except OSError as e:
            raise SchedulerError(operation, task_name, str(e)) from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip()
            raise SchedulerError(operation, task_name, detail or f"exit code {result.returncode}")
