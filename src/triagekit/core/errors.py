"""Structured error handling for triagekit."""

from pathlib import Path
from typing import Any

from triagekit.models.error import ErrorCode, StructuredError


class TriageError(Exception):
    """Base exception for triagekit errors.

    Wraps a StructuredError for consistent error handling.
    """

    def __init__(
        self,
        code: str,
        message: str,
        remediation: str,
        retryable: bool = False,
        context: dict[str, Any] | None = None,
    ):
        self.error = StructuredError(
            code=code,
            message=message,
            remediation=remediation,
            retryable=retryable,
            context=context,
        )
        super().__init__(message)

    def to_structured_error(self) -> dict:
        """Convert to JSON-serializable dict for output."""
        return self.error.model_dump(mode="json", exclude_none=True)


class PreconditionError(TriageError):
    """A launch precondition is not met; nothing is scheduled."""

    pass


class NotElevatedError(PreconditionError):
    """The orchestrating process lacks administrative rights."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.NOT_ELEVATED,
            message="Administrative privileges are required to register the acquisition task",
            remediation="Re-run from an elevated (Run as administrator) prompt",
            retryable=False,
        )


class CollectorNotFoundError(PreconditionError):
    """The collector executable is not present under the search root."""

    def __init__(self, filename: str, root: Path, max_depth: int):
        super().__init__(
            code=ErrorCode.COLLECTOR_NOT_FOUND,
            message=f"{filename} not found under {root} (depth {max_depth})",
            remediation="Copy the collector onto the removable media or raise search_depth",
            retryable=False,
            context={"filename": filename, "root": str(root), "max_depth": max_depth},
        )


class SchedulerError(TriageError):
    """Task registration or start was rejected by the OS scheduler."""

    def __init__(self, operation: str, task_name: str, detail: str):
        super().__init__(
            code=ErrorCode.SCHEDULER_ERROR,
            message=f"{operation} failed for task {task_name}: {detail}",
            remediation="Check that the Task Scheduler service is running and the task name is free",
            retryable=True,
            context={"operation": operation, "task_name": task_name},
        )


class CollectorExecutionError(TriageError):
    """The collector process could not be launched or awaited."""

    def __init__(self, collector: str, detail: str):
        super().__init__(
            code=ErrorCode.COLLECTOR_EXECUTION_ERROR,
            message=f"Failed to run {collector}: {detail}",
            remediation="Verify the collector path and that the media is still mounted",
            retryable=False,
            context={"collector": collector},
        )


class LogPersistenceError(TriageError):
    """The structured audit log could not be read back."""

    def __init__(self, path: Path, detail: str):
        super().__init__(
            code=ErrorCode.LOG_PERSISTENCE_ERROR,
            message=f"Unreadable structured log {path}: {detail}",
            remediation="Inspect the quarantined copy next to the log file",
            retryable=False,
            context={"path": str(path)},
        )


class ConfigError(TriageError):
    """Settings file is missing or invalid."""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(
            code=ErrorCode.CONFIG_ERROR,
            message=message,
            remediation="Fix the settings file or remove it to use defaults",
            retryable=False,
            context={"path": str(path)} if path else None,
        )
