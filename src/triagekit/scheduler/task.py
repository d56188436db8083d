"""Task descriptor construction for the execution wrapper."""

import sys
from datetime import datetime, timedelta
from pathlib import Path
from uuid import uuid4

from triagekit.config import AcquisitionSettings
from triagekit.models.custody import CaseMetadata
from triagekit.models.task import TaskDescriptor

WRAPPER_MODULE = "triagekit.cli.main"
WRAPPER_LOG_FILE = "wrapper.log"


def new_task_name(prefix: str) -> str:
    """Task name with a random suffix so pending tasks never collide."""
    return f"{prefix}-{uuid4().hex}"


def wrapper_arguments(params_path: Path) -> list[str]:
    """Interpreter arguments that run the wrapper on a parameters file.

    Diagnostics of the console-less task are mirrored into the case folder.
    """
    log_file = Path(params_path).parent / WRAPPER_LOG_FILE
    return [
        "-m",
        WRAPPER_MODULE,
        "--log-file",
        str(log_file),
        "run-task",
        "--params",
        str(params_path),
    ]


def build_task_descriptor(
    task_name: str,
    params_path: Path,
    metadata: CaseMetadata,
    settings: AcquisitionSettings,
    now: datetime,
) -> TaskDescriptor:
    """Describe the scheduled task that runs the execution wrapper.

    Args:
        task_name: Name from :func:`new_task_name`
        params_path: ``wrapper.json`` inside the case folder
        metadata: Resolved case metadata
        settings: Acquisition settings (delay, principal, interpreter)
        now: Registration time

    Returns:
        TaskDescriptor triggering once at ``now`` plus the start delay
    """
    return TaskDescriptor(
        name=task_name,
        description=f"Triage acquisition {metadata.case_id} on {metadata.hostname}",
        executable=settings.python_executable or sys.executable,
        arguments=wrapper_arguments(params_path),
        working_directory=str(Path(params_path).parent),
        principal=settings.task_principal,
        start_at=now + timedelta(seconds=settings.start_delay_seconds),
    )
