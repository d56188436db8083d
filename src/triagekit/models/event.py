"""Audit log event models.

Events are persisted as camelCase JSON objects, one per lifecycle step of
the execution wrapper: ``start``, then exactly one of ``end`` or ``error``.
"""

from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from triagekit.models.custody import AcquisitionRecord


class _BaseEvent(BaseModel):
    time: datetime = Field(..., description="Local wall-clock emission time")
    output_path: str = Field(..., alias="outputPath")
    usb_root: str = Field(..., alias="usbRoot")
    task_name: str = Field(..., alias="taskName")

    model_config = {"populate_by_name": True}


class StartEvent(_BaseEvent):
    """Collector launch."""

    event: Literal["start"] = "start"
    kape: str = Field(..., description="Collector executable path")
    system: str = Field(..., description="Acquired hostname")
    chain_of_custody: AcquisitionRecord = Field(..., alias="chainOfCustody")


class EndEvent(_BaseEvent):
    """Collector exit, with its exit code captured verbatim."""

    event: Literal["end"] = "end"
    kape: str
    system: str
    exit_code: int = Field(..., alias="exitCode")
    duration: str = Field(..., description="Elapsed time as HH:MM:SS")
    duration_seconds: float = Field(..., ge=0, alias="durationSeconds")
    chain_of_custody: AcquisitionRecord = Field(..., alias="chainOfCustody")


class ErrorEvent(_BaseEvent):
    """Failure while launching or awaiting the collector."""

    event: Literal["error"] = "error"
    message: str
    stack: str = ""
    case_id: str = Field(..., alias="caseId")
    incident_id: str = Field(..., alias="incidentId")


LogEvent = Annotated[StartEvent | EndEvent | ErrorEvent, Field(discriminator="event")]

LOG_EVENT_ADAPTER: TypeAdapter[LogEvent] = TypeAdapter(LogEvent)
