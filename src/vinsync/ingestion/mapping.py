"""Project an authoritative telemetry record onto tracker update fields."""

from __future__ import annotations

from vinsync.ingestion.normalize import is_meaningful
from vinsync.models.payload import UpdatePayload
from vinsync.models.telemetry import TelemetryRecord


def map_fields(record: TelemetryRecord) -> UpdatePayload:
    """Build the partial update for *record*.

    Only values present and non-empty on the record are included. A record
    without a ``devices`` block yields no device entries.
    """
    candidates: dict[str, str | None] = {
        "ceq_id": record.ceq_id,
        "company_name": record.company_name,
    }
    if record.devices is not None:
        candidates["tdac"] = record.devices.tdac
        candidates["device_bundle_version"] = record.devices.device_bundle_version

    return UpdatePayload(**{name: value for name, value in candidates.items() if is_meaningful(value)})
