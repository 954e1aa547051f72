from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from vinsync.config import TrackerFieldIds
from vinsync.ingestion.normalize import normalize_timestamp_seconds
from vinsync.models.issue import TrackedIssue
from vinsync.models.payload import UpdatePayload
from vinsync.models.telemetry import TelemetryRecord


def test_telemetry_record_parses_camel_case_and_keeps_raw() -> None:
    raw = {
        "timestamp": "1771000000",
        "position": {"latitude": "52.1", "longitude": 4.5},
        "engineHours": "88.25",
        "archived": True,
        "ceqId": 991,
        "companyName": " Acme ",
        "devices": {"tdac": "T-9", "deviceBundleVersion": 3},
        "unknownKey": "ignored",
    }

    record = TelemetryRecord.model_validate(raw)

    assert record.timestamp == 1_771_000_000.0
    assert record.position is not None
    assert record.position.lat == 52.1
    assert record.position.lon == 4.5
    assert record.engine_hours == 88.25
    assert record.archived is True
    assert record.ceq_id == "991"
    assert record.company_name == "Acme"
    assert record.devices is not None
    assert record.devices.device_bundle_version == "3"
    assert record.raw == raw


def test_telemetry_record_all_fields_optional() -> None:
    record = TelemetryRecord.model_validate({})

    assert record.timestamp is None
    assert record.devices is None
    assert record.company_name is None


def test_telemetry_record_is_immutable() -> None:
    record = TelemetryRecord.model_validate({"companyName": "Acme"})

    with pytest.raises(ValidationError):
        record.company_name = "Other"  # type: ignore[misc]


def test_telemetry_record_non_mapping_devices_is_absent() -> None:
    record = TelemetryRecord.model_validate({"devices": "n/a"})

    assert record.devices is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, True),
        ("false", False),
        (" Yes ", True),
        (0, False),
        ("unknown", None),
        (2, None),
        ({"flag": True}, None),
    ],
)
def test_telemetry_record_archived_is_lenient(value: object, expected: bool | None) -> None:
    record = TelemetryRecord.model_validate({"archived": value, "ceqId": "CEQ-1"})

    assert record.archived is expected
    assert record.ceq_id == "CEQ-1"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("", None),
        (0, None),
        (-5, None),
        (1_771_000_000, 1_771_000_000.0),
        (1_771_000_000_500, 1_771_000_000.5),
        ("2026-02-13T16:26:40Z", datetime(2026, 2, 13, 16, 26, 40, tzinfo=UTC).timestamp()),
        ("2026-02-13T16:26:40", datetime(2026, 2, 13, 16, 26, 40, tzinfo=UTC).timestamp()),
        ("not a date", None),
    ],
)
def test_normalize_timestamp_seconds(value: object, expected: float | None) -> None:
    assert normalize_timestamp_seconds(value) == expected


def test_tracked_issue_from_tracker_reads_configured_fields() -> None:
    fields = TrackerFieldIds(vin="customfield_1", company_name="customfield_2")
    issue = TrackedIssue.from_tracker(
        {
            "id": "10042",
            "key": "FLEET-42",
            "fields": {"customfield_1": " 1ftfw1et5dfc10312 ", "customfield_2": None},
        },
        fields,
    )

    assert issue.id == "10042"
    assert issue.key == "FLEET-42"
    assert issue.vin == "1FTFW1ET5DFC10312"
    assert issue.company_name_already_set is False


@pytest.mark.parametrize(
    ("company_value", "expected"),
    [
        ("Acme", True),
        ({"value": "Acme"}, True),
        ([{"name": "Acme"}], True),
        ("", False),
        ("  ", False),
        ({"value": ""}, False),
        ([], False),
    ],
)
def test_tracked_issue_company_name_marker(company_value: object, expected: bool) -> None:
    fields = TrackerFieldIds()
    issue = TrackedIssue.from_tracker(
        {"id": "1", "key": "FLEET-1", "fields": {fields.vin: "VIN1", fields.company_name: company_value}},
        fields,
    )

    assert issue.company_name_already_set is expected


def test_tracked_issue_without_vin() -> None:
    issue = TrackedIssue.from_tracker({"id": "1", "key": "FLEET-1", "fields": {}}, TrackerFieldIds())

    assert issue.vin is None


def test_update_payload_renders_tracker_field_ids() -> None:
    fields = TrackerFieldIds(ceq_id="cf_ceq", company_name="cf_company", tdac="cf_tdac", device_bundle_version="cf_dbv")
    payload = UpdatePayload(ceq_id="CEQ-1", tdac="T-1")

    assert payload.to_tracker_fields(fields) == {"cf_ceq": "CEQ-1", "cf_tdac": "T-1"}
    assert len(payload) == 2
    assert not payload.is_empty
