"""Launch CLI command (orchestrating process)."""

from pathlib import Path

import click

from triagekit.cli.exit_codes import (
    EXIT_COLLECTOR_NOT_FOUND,
    EXIT_ERROR,
    EXIT_INVALID_ARGS,
    EXIT_PERMISSION_DENIED,
)
from triagekit.cli.output import OutputFormatter
from triagekit.config import load_settings
from triagekit.core.environment import EnvironmentContext
from triagekit.core.errors import (
    CollectorNotFoundError,
    ConfigError,
    NotElevatedError,
    TriageError,
)
from triagekit.launcher import launch_acquisition
from triagekit.models.custody import PartialCaseMetadata

_EXIT_CODES = {
    NotElevatedError: EXIT_PERMISSION_DENIED,
    CollectorNotFoundError: EXIT_COLLECTOR_NOT_FOUND,
    ConfigError: EXIT_INVALID_ARGS,
}


@click.command()
@click.option("--case-id", default=None, help="Case reference (default: AUTO-<timestamp>-<host>)")
@click.option("--incident-id", default=None, help="Incident reference (default: case ID)")
@click.option("--operator-name", default=None, help="Acquiring operator (default: current user)")
@click.option("--operator-id", default=None, help="Operator account (default: DOMAIN\\user)")
@click.option("--authorisation-ref", default=None, help="Warrant or ticket reference (default: AUTO)")
@click.option("--evidence-device-id", default=None, help="Evidence media identifier (default: media root)")
@click.option("--notes", default=None, help="Free-form notes")
@click.option(
    "--usb-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Removable media root (default: volume of the working directory)",
)
@click.pass_context
def launch(
    ctx: click.Context,
    case_id: str | None,
    incident_id: str | None,
    operator_name: str | None,
    operator_id: str | None,
    authorisation_ref: str | None,
    evidence_device_id: str | None,
    notes: str | None,
    usb_root: Path | None,
) -> None:
    """Create a case folder and schedule the collector as a background task."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    partial = PartialCaseMetadata(
        case_id=case_id,
        incident_id=incident_id,
        operator_name=operator_name,
        operator_id=operator_id,
        authorisation_ref=authorisation_ref,
        evidence_device_id=evidence_device_id,
        notes=notes,
    )

    try:
        env = EnvironmentContext.from_host(media_root=usb_root)
        settings = load_settings(ctx.obj.get("config_path"), env.media_root)
        result = launch_acquisition(partial, env, settings)
    except TriageError as e:
        formatter.error(e.to_structured_error())
        ctx.exit(_EXIT_CODES.get(type(e), EXIT_ERROR))

    formatter.output(result.to_json_dict())
