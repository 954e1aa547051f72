from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import pytest

from vinsync._api.telemetry import fetch_telemetry
from vinsync._transport import HttpResponse
from vinsync.exceptions import SourceUnavailableError, VinSyncTransportError


class _Provider:
    def __init__(self, response: HttpResponse | Exception) -> None:
        self._response = response
        self.endpoints: list[str] = []

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        self.endpoints.append(endpoint)
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


@pytest.mark.asyncio
async def test_fetch_telemetry_parses_bare_object() -> None:
    provider = _Provider(HttpResponse(200, {"timestamp": 100, "companyName": "Acme"}, "{...}"))

    record = await fetch_telemetry(provider, "1FTFW1ET5DFC10312")

    assert record is not None
    assert record.company_name == "Acme"
    assert provider.endpoints == ["/vehicles/1FTFW1ET5DFC10312"]


@pytest.mark.asyncio
async def test_fetch_telemetry_unwraps_data_envelope_and_lists() -> None:
    provider = _Provider(HttpResponse(200, {"data": [{"ceqId": "CEQ-1"}, {"ceqId": "CEQ-2"}]}, "{...}"))

    record = await fetch_telemetry(provider, "VIN1")

    assert record is not None
    assert record.ceq_id == "CEQ-1"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        HttpResponse(404, {"message": "not found"}, "{...}"),
        HttpResponse(200, None, ""),
        HttpResponse(200, [], "[]"),
        HttpResponse(200, {"data": None}, "{...}"),
    ],
)
async def test_fetch_telemetry_absent(response: HttpResponse) -> None:
    assert await fetch_telemetry(_Provider(response), "VIN1") is None


@pytest.mark.asyncio
async def test_fetch_telemetry_server_error_is_source_unavailable() -> None:
    with pytest.raises(SourceUnavailableError) as exc_info:
        await fetch_telemetry(_Provider(HttpResponse(503, None, "maintenance")), "VIN1")

    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_fetch_telemetry_network_error_is_source_unavailable() -> None:
    provider = _Provider(VinSyncTransportError("GET /vehicles/VIN1 failed: timeout", endpoint="/vehicles/VIN1"))

    with pytest.raises(SourceUnavailableError):
        await fetch_telemetry(provider, "VIN1")


@pytest.mark.asyncio
async def test_fetch_telemetry_quotes_vin_in_path() -> None:
    provider = _Provider(HttpResponse(404, None, ""))

    await fetch_telemetry(provider, "AB/12 34")

    assert provider.endpoints == ["/vehicles/AB%2F12%2034"]


@pytest.mark.asyncio
async def test_fetch_telemetry_unrecognised_archived_flag_keeps_record() -> None:
    body = {"timestamp": 100, "archived": "unknown", "ceqId": "CEQ-1", "companyName": "Acme"}

    record = await fetch_telemetry(_Provider(HttpResponse(200, body, "{...}")), "VIN1")

    assert record is not None
    assert record.archived is None
    assert record.ceq_id == "CEQ-1"
    assert record.company_name == "Acme"


@pytest.mark.asyncio
async def test_fetch_telemetry_scalar_data_key_is_not_an_envelope() -> None:
    body = {"ceqId": "CEQ-1", "data": "extra"}

    record = await fetch_telemetry(_Provider(HttpResponse(200, body, "{...}")), "VIN1")

    assert record is not None
    assert record.ceq_id == "CEQ-1"
