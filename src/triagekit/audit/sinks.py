"""Structured record sinks for the audit log.

The default sink keeps ``runlog.json`` as a single JSON array and rewrites
it on every append. It assumes one writer per case folder and is not safe
against concurrent writers. ``JsonLinesSink`` is an opt-in alternative that
appends one object per line instead of rewriting.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from triagekit.core import logging
from triagekit.core.errors import LogPersistenceError

RecoveryCallback = Callable[[LogPersistenceError, Path | None], None]


class RecordSink(ABC):
    """Ordered, append-only store of structured audit records."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    @abstractmethod
    def append(self, record: dict[str, Any]) -> None:
        """Append one record after all previously stored records."""
        pass

    @abstractmethod
    def read(self) -> list[dict[str, Any]]:
        """Return stored records in append order."""
        pass


class JsonArraySink(RecordSink):
    """Read-modify-rewrite JSON array file.

    Unreadable prior content is moved aside to ``<name>.corrupt-<timestamp>``
    and the log restarts from an empty array. The rewrite goes through a
    temporary file and ``os.replace`` so an interrupted write leaves the
    previous array intact.
    """

    FILE_NAME = "runlog.json"

    def __init__(self, path: Path, on_recover: RecoveryCallback | None = None) -> None:
        super().__init__(path)
        self._on_recover = on_recover

    def append(self, record: dict[str, Any]) -> None:
        try:
            records = self._load()
        except LogPersistenceError as e:
            quarantined = self._quarantine()
            logging.warning(
                "Structured log unreadable, starting fresh",
                path=str(self.path),
                quarantined=str(quarantined) if quarantined else None,
            )
            if self._on_recover:
                self._on_recover(e, quarantined)
            records = []

        records.append(record)
        self._rewrite(records)

    def read(self) -> list[dict[str, Any]]:
        try:
            return self._load()
        except LogPersistenceError:
            return []

    def _load(self) -> list[dict[str, Any]]:
        """Load existing records.

        Raises:
            LogPersistenceError: If the file exists but is not a JSON array
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise LogPersistenceError(self.path, str(e)) from e

        if not content.strip():
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise LogPersistenceError(self.path, str(e)) from e

        # A lone object is a one-record log
        if isinstance(data, dict):
            return [data]
        if not isinstance(data, list):
            raise LogPersistenceError(self.path, f"expected a JSON array, got {type(data).__name__}")
        return data

    def _quarantine(self) -> Path | None:
        """Move unreadable content out of the way, if possible."""
        stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S%fZ")
        target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        try:
            os.replace(self.path, target)
        except OSError as e:
            logging.warning("Could not quarantine structured log", path=str(self.path), error=str(e))
            return None
        return target

    def _rewrite(self, records: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, default=str)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        finally:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass


class JsonLinesSink(RecordSink):
    """One JSON object per line; appends never rewrite earlier records."""

    FILE_NAME = "runlog.jsonl"

    def append(self, record: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str) + "\n")
            f.flush()
            os.fsync(f.fileno())

    def read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []

        records = []
        with open(self.path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    try:
                        records.append(json.loads(line))
                    except json.JSONDecodeError:
                        continue

        return records


def create_sink(
    output_dir: Path,
    record_format: str = "array",
    on_recover: RecoveryCallback | None = None,
) -> RecordSink:
    """Create the record sink for a case folder.

    Args:
        output_dir: Case folder
        record_format: ``array`` (runlog.json) or ``jsonl`` (runlog.jsonl)
        on_recover: Called when the array sink discards unreadable content

    Returns:
        RecordSink instance
    """
    if record_format == "jsonl":
        return JsonLinesSink(Path(output_dir) / JsonLinesSink.FILE_NAME)
    if record_format == "array":
        return JsonArraySink(Path(output_dir) / JsonArraySink.FILE_NAME, on_recover=on_recover)
    raise ValueError(f"Unknown record format: {record_format}")
