"""Scheduled task and wrapper parameter models."""

import subprocess
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import ClassVar, Literal

from pydantic import BaseModel, Field

from triagekit.models.custody import CaseMetadata

TASK_NAMESPACE = "http://schemas.microsoft.com/windows/2004/02/mit/task"

# Service identities that log on without a stored password
WELL_KNOWN_PRINCIPALS = {
    "SYSTEM": "S-1-5-18",
    "LOCAL SERVICE": "S-1-5-19",
    "NETWORK SERVICE": "S-1-5-20",
}

RecordFormat = Literal["array", "jsonl"]


class TaskDescriptor(BaseModel):
    """One-shot, elevated, delayed-start task definition."""

    name: str = Field(..., min_length=1, description="Unique task name")
    description: str = Field(default="", description="Task description")
    executable: str = Field(..., description="Program started by the task")
    arguments: list[str] = Field(default_factory=list, description="Argument vector")
    working_directory: str | None = Field(default=None)
    principal: str = Field(default="SYSTEM", description="Identity the task runs as")
    run_level: Literal["HighestAvailable", "LeastPrivilege"] = "HighestAvailable"
    start_at: datetime = Field(..., description="One-shot trigger time")

    def command_arguments(self) -> str:
        """Argument vector serialised as a single Windows command line."""
        return subprocess.list2cmdline(self.arguments)

    def to_xml(self) -> str:
        """Render as a Task Scheduler 1.2 definition."""
        task = ET.Element("Task", {"version": "1.2", "xmlns": TASK_NAMESPACE})

        registration = ET.SubElement(task, "RegistrationInfo")
        ET.SubElement(registration, "Description").text = self.description
        ET.SubElement(registration, "URI").text = f"\\{self.name}"

        triggers = ET.SubElement(task, "Triggers")
        trigger = ET.SubElement(triggers, "TimeTrigger")
        ET.SubElement(trigger, "StartBoundary").text = (
            self.start_at.astimezone().strftime("%Y-%m-%dT%H:%M:%S")
        )
        ET.SubElement(trigger, "Enabled").text = "true"

        principals = ET.SubElement(task, "Principals")
        principal = ET.SubElement(principals, "Principal", {"id": "Author"})
        sid = WELL_KNOWN_PRINCIPALS.get(self.principal.upper())
        if sid:
            ET.SubElement(principal, "UserId").text = sid
        else:
            ET.SubElement(principal, "UserId").text = self.principal
            ET.SubElement(principal, "LogonType").text = "S4U"
        ET.SubElement(principal, "RunLevel").text = self.run_level

        settings = ET.SubElement(task, "Settings")
        for tag, value in (
            ("MultipleInstancesPolicy", "IgnoreNew"),
            ("DisallowStartIfOnBatteries", "false"),
            ("StopIfGoingOnBatteries", "false"),
            ("StartWhenAvailable", "true"),
            ("Hidden", "true"),
            ("Enabled", "true"),
            ("ExecutionTimeLimit", "PT0S"),
        ):
            ET.SubElement(settings, tag).text = value

        actions = ET.SubElement(task, "Actions", {"Context": "Author"})
        exec_action = ET.SubElement(actions, "Exec")
        ET.SubElement(exec_action, "Command").text = self.executable
        if self.arguments:
            ET.SubElement(exec_action, "Arguments").text = self.command_arguments()
        if self.working_directory:
            ET.SubElement(exec_action, "WorkingDirectory").text = self.working_directory

        ET.indent(task)
        return ET.tostring(task, encoding="unicode", xml_declaration=False)


class WrapperParameters(BaseModel):
    """Everything the detached execution wrapper needs to run.

    Written into the case folder by the orchestrating process and read back
    by the scheduled task; the two processes share nothing else.
    """

    FILE_NAME: ClassVar[str] = "wrapper.json"

    collector_path: str
    collector_args: list[str] = Field(default_factory=list)
    output_path: str
    usb_root: str
    task_name: str
    record_format: RecordFormat = "array"
    metadata: CaseMetadata

    def save(self, path: Path) -> Path:
        """Write parameters as JSON.

        Args:
            path: Destination file

        Returns:
            Path written
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(by_alias=True, indent=2))
        return path

    @classmethod
    def load(cls, path: Path) -> "WrapperParameters":
        """Read parameters written by :meth:`save`."""
        with open(path, encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
