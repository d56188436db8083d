"""Chain-of-custody models attached to every audit record."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from triagekit import __version__


class _CustodyFields(BaseModel):
    """Identity and authorisation fields shared by metadata and records."""

    case_id: str = Field(..., alias="CaseId", description="Case reference")
    incident_id: str = Field(..., alias="IncidentId", description="Incident reference")
    operator_name: str = Field(..., alias="OperatorName", description="Acquiring operator")
    operator_id: str = Field(..., alias="OperatorId", description="Operator account (DOMAIN\\user)")
    authorisation_ref: str = Field(
        ..., alias="AuthorisationRef", description="Warrant or ticket authorising the acquisition"
    )
    evidence_device_id: str = Field(
        ..., alias="EvidenceDeviceId", description="Removable media receiving the evidence"
    )
    hostname: str = Field(..., alias="Hostname", description="Acquired host")
    notes: str = Field(default="", alias="Notes", description="Free-form operator notes")

    model_config = {"populate_by_name": True}

    def to_json_dict(self) -> dict[str, Any]:
        """Convert to JSON-serializable dict with custody key names."""
        return self.model_dump(mode="json", by_alias=True)


class CaseMetadata(_CustodyFields):
    """Resolved, fully populated case identity for one run."""

    model_config = {"populate_by_name": True, "frozen": True}


class PartialCaseMetadata(BaseModel):
    """Caller-supplied metadata; anything left unset gets a default."""

    case_id: str | None = None
    incident_id: str | None = None
    operator_name: str | None = None
    operator_id: str | None = None
    authorisation_ref: str | None = None
    evidence_device_id: str | None = None
    notes: str | None = None


class AcquisitionRecord(_CustodyFields):
    """Case metadata plus the acquisition window.

    Opened once when the collector starts and closed once when it exits.
    """

    acquisition_start_utc: datetime | None = Field(default=None, alias="AcquisitionStartUtc")
    acquisition_end_utc: datetime | None = Field(default=None, alias="AcquisitionEndUtc")
    script_version: str = Field(default=__version__, alias="ScriptVersion")

    model_config = {"populate_by_name": True, "validate_assignment": True}

    @classmethod
    def open(
        cls,
        metadata: CaseMetadata,
        started_at: datetime,
        script_version: str = __version__,
    ) -> "AcquisitionRecord":
        """Start a record for the given case at ``started_at``."""
        return cls(
            **metadata.model_dump(),
            acquisition_start_utc=started_at,
            script_version=script_version,
        )

    def close(self, ended_at: datetime) -> None:
        """Set the end of the acquisition window.

        Raises:
            RuntimeError: If the record was already closed
        """
        if self.acquisition_end_utc is not None:
            raise RuntimeError(f"Acquisition record for {self.case_id} already closed")
        self.acquisition_end_utc = ended_at
