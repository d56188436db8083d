"""Audit logging for acquisition runs."""

from triagekit.audit.log import AuditLog
from triagekit.audit.sinks import JsonArraySink, JsonLinesSink, RecordSink, create_sink

__all__ = [
    "AuditLog",
    "RecordSink",
    "JsonArraySink",
    "JsonLinesSink",
    "create_sink",
]
