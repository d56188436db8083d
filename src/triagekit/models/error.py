"""Structured error model for triagekit."""

from typing import Any

from pydantic import BaseModel, Field


class StructuredError(BaseModel):
    """Machine-readable failure emitted by the orchestrating process.

    A wrapping script can branch on ``code`` and show ``remediation`` to the
    operator; the process exit code carries the same classification.
    """

    code: str = Field(..., pattern=r"^[A-Z][A-Z0-9_]*$", description="Stable error code")
    message: str = Field(..., description="What went wrong")
    remediation: str = Field(..., description="What the operator can do about it")
    retryable: bool = Field(..., description="Whether running launch again may succeed")
    context: dict[str, Any] | None = Field(default=None, description="Paths, task names and limits involved")

    model_config = {"extra": "forbid"}


class ErrorCode:
    """Error codes emitted by triagekit."""

    NOT_ELEVATED = "NOT_ELEVATED"
    COLLECTOR_NOT_FOUND = "COLLECTOR_NOT_FOUND"
    SCHEDULER_ERROR = "SCHEDULER_ERROR"
    COLLECTOR_EXECUTION_ERROR = "COLLECTOR_EXECUTION_ERROR"
    LOG_PERSISTENCE_ERROR = "LOG_PERSISTENCE_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
