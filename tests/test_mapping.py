from __future__ import annotations

from vinsync.ingestion.mapping import map_fields
from vinsync.models.telemetry import TelemetryRecord


def _full_payload() -> dict[str, object]:
    return {
        "timestamp": 1_771_000_000,
        "position": {"lat": 52.3676, "lon": 4.9041},
        "engineHours": 1234.5,
        "archived": False,
        "ceqId": "CEQ-778",
        "companyName": "Acme Haulage",
        "devices": {"tdac": "TDAC-42", "deviceBundleVersion": "7.1.3"},
    }


def test_all_four_fields_present_yields_four_entries() -> None:
    payload = map_fields(TelemetryRecord.model_validate(_full_payload()))

    assert payload.entries() == {
        "ceq_id": "CEQ-778",
        "company_name": "Acme Haulage",
        "tdac": "TDAC-42",
        "device_bundle_version": "7.1.3",
    }
    assert len(payload) == 4


def test_missing_devices_container_suppresses_device_entries() -> None:
    raw = _full_payload()
    raw["devices"] = None

    payload = map_fields(TelemetryRecord.model_validate(raw))

    assert set(payload.entries()) == {"ceq_id", "company_name"}


def test_empty_and_sentinel_values_are_omitted() -> None:
    raw = _full_payload()
    raw["companyName"] = "   "
    raw["ceqId"] = "--"
    raw["devices"] = {"tdac": "", "deviceBundleVersion": "7.1.3"}

    payload = map_fields(TelemetryRecord.model_validate(raw))

    assert payload.entries() == {"device_bundle_version": "7.1.3"}


def test_position_and_engine_hours_are_not_mapped() -> None:
    record = TelemetryRecord.model_validate({"position": {"lat": 1.0, "lon": 2.0}, "engineHours": 10})

    payload = map_fields(record)

    assert payload.is_empty
    assert len(payload) == 0
