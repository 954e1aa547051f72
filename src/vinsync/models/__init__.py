"""Typed models for telemetry records, tracked issues and update payloads."""

from vinsync.models.issue import TrackedIssue
from vinsync.models.payload import UpdatePayload
from vinsync.models.telemetry import Devices, Position, TelemetryRecord

__all__ = [
    "Devices",
    "Position",
    "TelemetryRecord",
    "TrackedIssue",
    "UpdatePayload",
]
