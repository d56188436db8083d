"""Case metadata resolution.

Fills every chain-of-custody field, taking caller input where given and
falling back to a documented default otherwise:

    CaseId            AUTO-<YYYYMMDDHHMMSS>-<hostname>
    IncidentId        the resolved CaseId
    OperatorName      current user, or "Unknown"
    OperatorId        <domain>\\<user> when both are known, else OperatorName
    AuthorisationRef  "AUTO"
    EvidenceDeviceId  removable media root identifier
    Notes             ""
"""

from triagekit.core.environment import EnvironmentContext
from triagekit.models.custody import CaseMetadata, PartialCaseMetadata

UNKNOWN_OPERATOR = "Unknown"
AUTO_AUTHORISATION = "AUTO"


def _given(value: str | None) -> str | None:
    """Treat blank input the same as missing input."""
    if value is None or not value.strip():
        return None
    return value.strip()


def default_case_id(env: EnvironmentContext) -> str:
    """Generate a case ID from the environment clock and hostname."""
    return f"AUTO-{env.now():%Y%m%d%H%M%S}-{env.hostname}"


def resolve(partial: PartialCaseMetadata | None, env: EnvironmentContext) -> CaseMetadata:
    """Resolve caller input into fully populated case metadata.

    Args:
        partial: Caller-supplied fields (any may be unset)
        env: Host environment supplying defaults

    Returns:
        CaseMetadata with every field set
    """
    partial = partial or PartialCaseMetadata()

    case_id = _given(partial.case_id) or default_case_id(env)
    operator_name = _given(partial.operator_name) or _given(env.username) or UNKNOWN_OPERATOR

    operator_id = _given(partial.operator_id)
    if operator_id is None:
        if _given(env.domain) and _given(env.username):
            operator_id = f"{env.domain}\\{env.username}"
        else:
            operator_id = operator_name

    return CaseMetadata(
        case_id=case_id,
        incident_id=_given(partial.incident_id) or case_id,
        operator_name=operator_name,
        operator_id=operator_id,
        authorisation_ref=_given(partial.authorisation_ref) or AUTO_AUTHORISATION,
        evidence_device_id=_given(partial.evidence_device_id) or env.media_id,
        hostname=env.hostname,
        notes=partial.notes or "",
    )
