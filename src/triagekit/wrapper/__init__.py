"""Execution wrapper run by the scheduled task."""

from triagekit.wrapper.execution import ExecutionWrapper, WrapperState, run_collector

__all__ = ["ExecutionWrapper", "WrapperState", "run_collector"]
