"""Deterministic source selection and update gating.

This module intentionally contains *no* I/O and no payload parsing. The
ingestion/Pydantic boundary produces normalized records; the driver owns
sequencing and error handling.
"""

from __future__ import annotations

from typing import NamedTuple

from vinsync.models.issue import TrackedIssue
from vinsync.models.payload import UpdatePayload
from vinsync.models.telemetry import TelemetryRecord
from vinsync.sync.outcomes import SkipReason, SourceLabel


class Reconciled(NamedTuple):
    record: TelemetryRecord
    source: SourceLabel


def _timestamp_key(record: TelemetryRecord) -> float:
    # A missing timestamp orders before any reported one.
    return record.timestamp if record.timestamp is not None else float("-inf")


def reconcile(primary: TelemetryRecord | None, secondary: TelemetryRecord | None) -> Reconciled | None:
    """Pick the authoritative record for a VIN.

    Policy (last write wins):
    - Neither source has data: ``None``.
    - One source has data: that record.
    - Both have data: the strictly newer timestamp wins; ties go to PRIMARY.

    Assumes both providers report comparable, synchronized clocks.
    """
    if primary is None:
        return None if secondary is None else Reconciled(secondary, SourceLabel.SECONDARY)
    if secondary is None:
        return Reconciled(primary, SourceLabel.PRIMARY)
    if _timestamp_key(secondary) > _timestamp_key(primary):
        return Reconciled(secondary, SourceLabel.SECONDARY)
    return Reconciled(primary, SourceLabel.PRIMARY)


def skip_reason(issue: TrackedIssue, payload: UpdatePayload) -> SkipReason | None:
    """Return why an update must not be attempted, or ``None`` to proceed."""
    # companyName doubles as the "already enriched" marker; there is no
    # other record of processed issues.
    if issue.company_name_already_set:
        return SkipReason.ALREADY_ENRICHED
    if payload.is_empty:
        return SkipReason.NO_NEW_FIELDS
    return None


def should_update(issue: TrackedIssue, payload: UpdatePayload) -> bool:
    return skip_reason(issue, payload) is None
