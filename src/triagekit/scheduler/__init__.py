"""Scheduling of the detached acquisition task."""

from triagekit.scheduler.backend import SchedulerBackend, SchtasksBackend
from triagekit.scheduler.orchestrator import OrchestrationResult, TaskOrchestrator
from triagekit.scheduler.task import build_task_descriptor, new_task_name

__all__ = [
    "SchedulerBackend",
    "SchtasksBackend",
    "TaskOrchestrator",
    "OrchestrationResult",
    "build_task_descriptor",
    "new_task_name",
]
