"""Orchestrating-process pipeline.

Checks preconditions, resolves metadata, builds the case folder, writes the
wrapper parameters and hands the wrapper task to the scheduler. Returns as
soon as the task is live; the acquisition itself runs in the scheduled task.
"""

from dataclasses import dataclass
from pathlib import Path

from triagekit.collectors.kape import build_collector_args
from triagekit.config import AcquisitionSettings
from triagekit.core import logging, workspace
from triagekit.core.environment import EnvironmentContext
from triagekit.core.errors import NotElevatedError
from triagekit.core.locator import locate
from triagekit.core.metadata import resolve
from triagekit.models.custody import CaseMetadata, PartialCaseMetadata
from triagekit.models.task import WrapperParameters
from triagekit.scheduler.backend import SchedulerBackend
from triagekit.scheduler.orchestrator import OrchestrationResult, TaskOrchestrator
from triagekit.scheduler.task import build_task_descriptor, new_task_name


@dataclass
class LaunchResult:
    output_path: Path
    collector_path: Path
    metadata: CaseMetadata
    orchestration: OrchestrationResult

    def to_json_dict(self) -> dict:
        return {
            "outputPath": str(self.output_path),
            "collector": str(self.collector_path),
            "caseId": self.metadata.case_id,
            "incidentId": self.metadata.incident_id,
            "chainOfCustody": self.metadata.to_json_dict(),
            **self.orchestration.to_json_dict(),
        }


def launch_acquisition(
    partial: PartialCaseMetadata | None,
    env: EnvironmentContext,
    settings: AcquisitionSettings,
    backend: SchedulerBackend | None = None,
) -> LaunchResult:
    """Prepare a case folder and schedule the collector.

    Args:
        partial: Caller-supplied case metadata
        env: Host environment
        settings: Acquisition settings
        backend: Scheduler backend (defaults to schtasks.exe)

    Returns:
        LaunchResult; scheduler failures are reported in it, not raised

    Raises:
        NotElevatedError: If the process is not elevated
        CollectorNotFoundError: If the collector is not on the media
    """
    if not env.elevated:
        raise NotElevatedError()

    collector = locate(env.media_root, settings.collector_filename, settings.search_depth)
    logging.info("Collector located", path=str(collector))

    now = env.now()
    metadata = resolve(partial, env)
    output_dir = workspace.build(env.media_root, env.hostname, now)
    logging.info("Case folder ready", path=str(output_dir), case=metadata.case_id)

    task_name = new_task_name(settings.task_prefix)
    params = WrapperParameters(
        collector_path=str(collector),
        collector_args=build_collector_args(
            source=settings.source_drive,
            destination=output_dir,
            target=settings.target_profile,
            hostname=env.hostname,
            stealth=settings.stealth,
        ),
        output_path=str(output_dir),
        usb_root=str(env.media_root),
        task_name=task_name,
        record_format=settings.record_format,
        metadata=metadata,
    )
    params_path = params.save(output_dir / WrapperParameters.FILE_NAME)

    descriptor = build_task_descriptor(task_name, params_path, metadata, settings, now)
    orchestrator = TaskOrchestrator(
        output_dir,
        backend=backend,
        clock=env.clock,
        case_id=metadata.case_id,
    )
    result = orchestrator.launch(descriptor)

    return LaunchResult(
        output_path=output_dir,
        collector_path=collector,
        metadata=metadata,
        orchestration=result,
    )
