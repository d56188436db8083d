"""Diagnostic logging for triagekit.

Diagnostics go to stderr so stdout carries only command results. The
scheduled task runs without a console, so its diagnostics can also be
mirrored into a file in the case folder. None of this is the audit log:
``runlog.txt`` and ``runlog.json`` are written by :mod:`triagekit.audit`.
"""

import json
import os
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Literal

Level = Literal["debug", "info", "warning", "error"]
LogFormat = Literal["text", "json"]

_SEVERITY = {"debug": 10, "info": 20, "warning": 30, "error": 40}

_threshold = _SEVERITY["info"]
_log_format: LogFormat = "text"
_log_file: Path | None = None


def configure_logging(
    log_format: LogFormat = "text",
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> None:
    """Configure diagnostics for this process.

    Args:
        log_format: ``text`` lines or one JSON object per line
        verbose: Include debug messages
        quiet: Only warnings and errors (takes precedence over verbose)
        log_file: Also append every emitted line to this file
    """
    global _threshold, _log_format, _log_file
    if quiet:
        _threshold = _SEVERITY["warning"]
    elif verbose:
        _threshold = _SEVERITY["debug"]
    else:
        _threshold = _SEVERITY["info"]
    _log_format = log_format
    _log_file = Path(log_file) if log_file else None


def _render(level: Level, message: str, context: dict[str, Any]) -> str:
    if _log_format == "json":
        entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": level,
            "pid": os.getpid(),
            "message": message,
        }
        entry.update(context)
        return json.dumps(entry, default=str)

    parts = [f"{datetime.now().astimezone():%H:%M:%S}", level.upper().ljust(7), message]
    parts.extend(f"{key}={value}" for key, value in context.items() if value is not None)
    return " ".join(parts)


def _mirror(line: str) -> None:
    global _log_file
    try:
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError as e:
        print(f"Cannot write log file {_log_file}: {e}; mirroring disabled", file=sys.stderr)
        _log_file = None


def log(message: str, level: Level = "info", **context: Any) -> None:
    """Emit one diagnostic line.

    Context keys are appended as ``key=value`` in text mode and merged into
    the object in JSON mode. ``None`` values are left out of text lines.
    """
    if _SEVERITY[level] < _threshold:
        return

    line = _render(level, message, context)
    print(line, file=sys.stderr)
    if _log_file is not None:
        _mirror(line)


def debug(message: str, **context: Any) -> None:
    log(message, level="debug", **context)


def info(message: str, **context: Any) -> None:
    log(message, level="info", **context)


def warning(message: str, **context: Any) -> None:
    log(message, level="warning", **context)


def error(message: str, **context: Any) -> None:
    log(message, level="error", **context)
