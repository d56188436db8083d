"""triagekit command-line entry point.

One entry point serves both processes of an acquisition: ``launch`` runs
in the operator's elevated shell and returns once the task is scheduled,
``run-task`` is what the scheduled task executes, and ``status`` reads a
case folder afterwards.
"""

import sys
from pathlib import Path

import click

from triagekit import __version__
from triagekit.cli.exit_codes import EXIT_ERROR
from triagekit.cli.launch import launch
from triagekit.cli.output import OutputFormatter
from triagekit.cli.task import run_task, status
from triagekit.core.logging import configure_logging


@click.group()
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["json", "human"]),
    default="json",
    show_default=True,
    help="Result format on stdout",
)
@click.option("--verbose", "-v", is_flag=True, help="Include debug diagnostics on stderr")
@click.option("--quiet", "-q", is_flag=True, help="Only warnings and errors on stderr")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Diagnostic line format",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also append diagnostics to this file",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="TRIAGEKIT_CONFIG",
    default=None,
    help="Settings YAML (default: triagekit.yaml at the media root, if present)",
)
@click.version_option(version=__version__, prog_name="triagekit")
@click.pass_context
def cli(
    ctx: click.Context,
    output_format: str,
    verbose: bool,
    quiet: bool,
    log_format: str,
    log_file: Path | None,
    config_path: Path | None,
) -> None:
    """Scheduled, audit-logged triage acquisition from removable media."""
    configure_logging(log_format=log_format, verbose=verbose, quiet=quiet, log_file=log_file)
    ctx.obj = {
        "config_path": config_path,
        "formatter": OutputFormatter(format=output_format),
    }


cli.add_command(launch)
cli.add_command(run_task)
cli.add_command(status)


def main() -> None:
    """Console script entry point."""
    try:
        cli()
    except Exception as e:
        click.echo(f"triagekit: unexpected error: {e}", err=True)
        sys.exit(EXIT_ERROR)


if __name__ == "__main__":
    main()
