"""Result output for the triagekit CLI.

stdout carries only results: one JSON document per command by default, or
an aligned key/value listing with ``--format human``. Structured errors are
results too and go to stdout; diagnostics go to stderr.
"""

import json
import sys
from datetime import datetime
from enum import Enum
from pathlib import PurePath
from typing import Any, Literal, TextIO

from pydantic import BaseModel

OutputFormat = Literal["json", "human"]


def _jsonable(obj: Any) -> Any:
    """``json.dumps`` fallback for the types triagekit results contain."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, PurePath):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def write_json(data: Any, stream: TextIO | None = None) -> None:
    """Write ``data`` as a single JSON line."""
    stream = stream or sys.stdout
    stream.write(json.dumps(data, default=_jsonable, ensure_ascii=False))
    stream.write("\n")
    stream.flush()


def write_human(data: Any, stream: TextIO | None = None) -> None:
    """Write ``data`` as an indented listing for an operator at the console."""
    stream = stream or sys.stdout
    plain = json.loads(json.dumps(data, default=_jsonable))
    for line in _human_lines(plain, 0):
        stream.write(line + "\n")
    stream.flush()


def _scalar(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if value == [] or value == {}:
        return "(none)"
    return str(value)


def _human_lines(value: Any, depth: int) -> list[str]:
    pad = "  " * depth

    if isinstance(value, dict):
        width = max((len(str(key)) for key in value), default=0)
        lines = []
        for key, item in value.items():
            if isinstance(item, dict | list) and item:
                lines.append(f"{pad}{key}:")
                lines.extend(_human_lines(item, depth + 1))
            else:
                lines.append(f"{pad}{str(key).ljust(width)}  {_scalar(item)}")
        return lines

    if isinstance(value, list):
        lines = []
        for item in value:
            if isinstance(item, dict) and item:
                lines.append(f"{pad}-")
                lines.extend(_human_lines(item, depth + 1))
            else:
                lines.append(f"{pad}- {_scalar(item)}")
        return lines

    return [f"{pad}{_scalar(value)}"]


class OutputFormatter:
    """Writes command results in the format chosen on the command line."""

    def __init__(self, format: OutputFormat = "json", stream: TextIO | None = None):
        self.format = format
        self.stream = stream

    def output(self, data: Any) -> None:
        if self.format == "human":
            write_human(data, self.stream)
        else:
            write_json(data, self.stream)

    def error(self, error: Any) -> None:
        """Write a structured error in the configured format."""
        self.output(error)
