"""Scheduled-task side CLI commands."""

from pathlib import Path

import click
from pydantic import ValidationError

from triagekit.audit.log import AuditLog
from triagekit.audit.sinks import JsonLinesSink
from triagekit.cli.exit_codes import EXIT_ERROR, EXIT_SUCCESS
from triagekit.cli.output import OutputFormatter
from triagekit.core import logging
from triagekit.models.event import EndEvent
from triagekit.models.task import WrapperParameters
from triagekit.scheduler.orchestrator import TaskOrchestrator
from triagekit.wrapper.execution import ExecutionWrapper, WrapperState

_RUN_STATES = {
    "start": "running",
    "end": "completed",
    "error": "failed",
}


@click.command("run-task")
@click.option(
    "--params",
    "params_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="wrapper.json written by 'triagekit launch'",
)
@click.pass_context
def run_task(ctx: click.Context, params_path: Path) -> None:
    """Run the collector and record the outcome (scheduled task body)."""
    formatter: OutputFormatter = ctx.obj["formatter"]

    try:
        params = WrapperParameters.load(params_path)
    except (OSError, ValidationError) as e:
        logging.error("Cannot load wrapper parameters", path=str(params_path), error=str(e))
        ctx.exit(EXIT_ERROR)

    wrapper = ExecutionWrapper(params)
    state = wrapper.run()

    formatter.output(
        {
            "taskName": params.task_name,
            "outputPath": params.output_path,
            "state": state.value,
            "exitCode": wrapper.exit_code,
        }
    )
    ctx.exit(EXIT_SUCCESS if state == WrapperState.COMPLETED else EXIT_ERROR)


@click.command()
@click.argument("case_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_context
def status(ctx: click.Context, case_dir: Path) -> None:
    """Summarise the audit log of a case folder.

    Only records that validate as start, end or error events decide the run
    state; anything else is counted as unrecognised.
    """
    formatter: OutputFormatter = ctx.obj["formatter"]

    record_format = "jsonl" if (case_dir / JsonLinesSink.FILE_NAME).exists() else "array"
    audit_log = AuditLog(case_dir, record_format=record_format)
    records = audit_log.read_records()
    events = audit_log.read_events()
    last = events[-1] if events else None

    side_channel = case_dir / TaskOrchestrator.SIDE_CHANNEL_FILE
    scheduler_errors: list[str] = []
    if side_channel.exists():
        with open(side_channel, encoding="utf-8") as f:
            scheduler_errors = [line.rstrip("\n") for line in f if line.strip()]

    summary = {
        "outputPath": str(case_dir),
        "state": _RUN_STATES[last.event] if last else "pending",
        "events": len(events),
        "unrecognisedRecords": len(records) - len(events),
        "exitCode": last.exit_code if isinstance(last, EndEvent) else None,
        "lastEvent": last,
        "schedulerErrors": scheduler_errors,
    }
    formatter.output(summary)
