"""Telemetry record model."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from vinsync.ingestion.normalize import normalize_timestamp_seconds, safe_bool, safe_float, safe_str
from vinsync.models._base import VinSyncBaseModel


class Position(VinSyncBaseModel):
    """Last known vehicle position in degrees."""

    lat: float | None = Field(default=None, validation_alias=AliasChoices("lat", "latitude"))
    lon: float | None = Field(default=None, validation_alias=AliasChoices("lon", "lng", "longitude"))

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)


class Devices(VinSyncBaseModel):
    """Telematics hardware installed in the vehicle."""

    tdac: str | None = None
    device_bundle_version: str | None = None

    @field_validator("tdac", "device_bundle_version", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str | None:
        return safe_str(value)


class TelemetryRecord(VinSyncBaseModel):
    """One provider's view of a vehicle.

    Every field is optional; providers omit whatever they do not track.

    Parameters
    ----------
    timestamp : float or None
        Time of the last report, in epoch seconds. Providers send epoch
        seconds, epoch milliseconds or ISO-8601 strings.
    position : Position or None
        Last known position.
    engine_hours : float or None
        Cumulative engine hours.
    archived : bool or None
        Whether the provider has archived the vehicle.
    ceq_id : str or None
        Provider equipment id.
    company_name : str or None
        Owning company.
    devices : Devices or None
        Installed telematics devices.
    raw : dict
        Full API response dict.
    """

    timestamp: float | None = Field(
        default=None,
        validation_alias=AliasChoices("timestamp", "lastUpdated", "updatedAt"),
    )
    position: Position | None = None
    engine_hours: float | None = None
    archived: bool | None = None
    ceq_id: str | None = None
    company_name: str | None = None
    devices: Devices | None = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: Any) -> float | None:
        return normalize_timestamp_seconds(value)

    @field_validator("engine_hours", mode="before")
    @classmethod
    def _coerce_engine_hours(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("archived", mode="before")
    @classmethod
    def _coerce_archived(cls, value: Any) -> bool | None:
        return safe_bool(value)

    @field_validator("ceq_id", "company_name", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("position", "devices", mode="before")
    @classmethod
    def _drop_non_mapping(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, VinSyncBaseModel)) else None
