"""Telemetry provider lookup: GET /vehicles/{vin}.

One call per source per VIN. An unknown VIN (404 or empty body) is
"absent", not an error.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from vinsync._constants import VEHICLE_ENDPOINT
from vinsync._transport import Transport
from vinsync.exceptions import SourceUnavailableError, VinSyncTransportError
from vinsync.models.telemetry import TelemetryRecord

_logger = logging.getLogger(__name__)


def _unwrap(body: Any) -> dict[str, Any] | None:
    """Return the vehicle object from a provider response body.

    Providers answer with a bare object, a ``{"data": ...}`` envelope, or a
    list of matches; the first match is used. A ``data`` key only counts as
    an envelope when it holds an object or a list.
    """
    if isinstance(body, dict) and isinstance(body.get("data"), (dict, list)):
        body = body["data"]
    if isinstance(body, list):
        body = body[0] if body else None
    if isinstance(body, dict) and body:
        return body
    return None


async def fetch_telemetry(transport: Transport, vin: str, *, source: str = "") -> TelemetryRecord | None:
    """Fetch the telemetry record for *vin*, or ``None`` when the provider has none."""
    endpoint = VEHICLE_ENDPOINT.format(vin=quote(vin, safe=""))
    try:
        response = await transport.request("GET", endpoint)
    except VinSyncTransportError as exc:
        raise SourceUnavailableError(str(exc), status_code=exc.status_code, endpoint=endpoint) from exc

    if response.status == 404:
        _logger.debug("No %s telemetry for VIN %s", source or "provider", vin)
        return None
    if response.status != 200:
        raise SourceUnavailableError(
            f"HTTP {response.status} from {endpoint}: {response.text[:200]}",
            status_code=response.status,
            endpoint=endpoint,
        )

    payload = _unwrap(response.body)
    if payload is None:
        return None
    try:
        record = TelemetryRecord.model_validate(payload)
    except ValidationError as exc:
        raise SourceUnavailableError(
            f"Unparseable telemetry from {endpoint}: {exc.error_count()} error(s)",
            status_code=response.status,
            endpoint=endpoint,
        ) from exc
    if not record.model_dump(exclude_none=True):
        _logger.debug("Empty %s telemetry for VIN %s", source or "provider", vin)
        return None
    return record
