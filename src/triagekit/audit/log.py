"""Dual-format audit log for one case folder.

``runlog.txt`` receives one ``<timestamp> - <message>`` line per call and is
flushed to disk on every write. Structured records go to a RecordSink
(``runlog.json`` by default). Both assume a single writer per case folder.
"""

import os
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from triagekit.audit.sinks import RecordSink, create_sink
from triagekit.core.environment import local_now
from triagekit.core.errors import LogPersistenceError
from triagekit.models.event import LOG_EVENT_ADAPTER, LogEvent

LINE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class AuditLog:
    """Append-only execution log for an acquisition run."""

    TEXT_FILE = "runlog.txt"

    def __init__(
        self,
        output_dir: Path,
        record_sink: RecordSink | None = None,
        record_format: str = "array",
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        """Initialize the audit log.

        Args:
            output_dir: Case folder holding the log files
            record_sink: Structured sink (defaults to one for ``record_format``)
            record_format: ``array`` or ``jsonl`` when no sink is given
            clock: Source of line timestamps
        """
        self.output_dir = Path(output_dir)
        self.text_file = self.output_dir / self.TEXT_FILE
        self._clock = clock
        self.sink = record_sink or create_sink(
            self.output_dir, record_format, on_recover=self._note_recovery
        )

    def append_line(self, message: str) -> None:
        """Append a timestamped line to the text log."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        line = f"{self._clock():{LINE_TIMESTAMP_FORMAT}} - {message}\n"
        with open(self.text_file, "a", encoding="utf-8") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())

    def append_record(self, event: LogEvent | BaseModel | dict[str, Any]) -> None:
        """Append a structured record after all earlier ones.

        Args:
            event: LogEvent model or an already-serialised record
        """
        if isinstance(event, BaseModel):
            record = event.model_dump(mode="json", by_alias=True)
        else:
            record = dict(event)
        self.sink.append(record)

    def read_records(self) -> list[dict[str, Any]]:
        """Structured records as stored, in append order."""
        return self.sink.read()

    def read_events(self) -> list[LogEvent]:
        """Structured records validated as LogEvents; invalid ones are skipped."""
        events = []
        for record in self.read_records():
            try:
                events.append(LOG_EVENT_ADAPTER.validate_python(record))
            except ValidationError:
                continue
        return events

    def _note_recovery(self, err: LogPersistenceError, quarantined: Path | None) -> None:
        where = f", previous content kept at {quarantined.name}" if quarantined else ""
        self.append_line(f"WARNING: {err}; structured log restarted{where}")
