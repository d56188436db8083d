"""Pydantic models for triagekit."""

from triagekit.models.custody import AcquisitionRecord, CaseMetadata, PartialCaseMetadata
from triagekit.models.error import StructuredError
from triagekit.models.event import EndEvent, ErrorEvent, LogEvent, StartEvent
from triagekit.models.task import TaskDescriptor, WrapperParameters

__all__ = [
    "AcquisitionRecord",
    "CaseMetadata",
    "PartialCaseMetadata",
    "StructuredError",
    "StartEvent",
    "EndEvent",
    "ErrorEvent",
    "LogEvent",
    "TaskDescriptor",
    "WrapperParameters",
]
