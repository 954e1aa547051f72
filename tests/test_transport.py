from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest

from vinsync._transport import JsonTransport
from vinsync.exceptions import VinSyncTransportError


class _StubResponse:
    def __init__(self, status: int, text: str, error: Exception | None) -> None:
        self.status = status
        self._text = text
        self._error = error

    async def __aenter__(self) -> _StubResponse:
        if self._error is not None:
            raise self._error
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    async def text(self) -> str:
        return self._text


@dataclass
class _StubSession:
    """Stands in for ``aiohttp.ClientSession.request`` and records each call."""

    status: int = 200
    text: str = ""
    error: Exception | None = None
    calls: list[dict[str, Any]] = field(default_factory=list)

    def request(self, method: str, url: str, **kwargs: Any) -> _StubResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        return _StubResponse(self.status, self.text, self.error)


def _transport(session: _StubSession, **kwargs: Any) -> JsonTransport:
    return JsonTransport("https://telemetry.example.com/", session, **kwargs)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_json_body_is_decoded() -> None:
    session = _StubSession(text='{"ceqId": "CEQ-1"}')

    response = await _transport(session).request("GET", "/vehicles/VIN1")

    assert response.status == 200
    assert response.body == {"ceqId": "CEQ-1"}
    assert session.calls[0]["url"] == "https://telemetry.example.com/vehicles/VIN1"


@pytest.mark.asyncio
async def test_html_error_page_keeps_status_without_body() -> None:
    session = _StubSession(status=502, text="<html><body>Bad Gateway</body></html>")

    response = await _transport(session).request("GET", "/vehicles/VIN1")

    assert response.status == 502
    assert response.body is None
    assert "Bad Gateway" in response.text


@pytest.mark.asyncio
async def test_invalid_json_on_success_raises_transport_error() -> None:
    session = _StubSession(status=200, text="not json")

    with pytest.raises(VinSyncTransportError) as exc_info:
        await _transport(session).request("GET", "/vehicles/VIN1")

    assert exc_info.value.status_code == 200
    assert exc_info.value.endpoint == "/vehicles/VIN1"


@pytest.mark.asyncio
async def test_empty_body_is_none() -> None:
    response = await _transport(_StubSession(status=204, text="  ")).request("PUT", "/rest/api/2/issue/1")

    assert response.status == 204
    assert response.body is None


@pytest.mark.asyncio
async def test_client_error_is_wrapped() -> None:
    session = _StubSession(error=aiohttp.ClientConnectionError("connection refused"))

    with pytest.raises(VinSyncTransportError) as exc_info:
        await _transport(session).request("GET", "/vehicles/VIN1")

    assert exc_info.value.endpoint == "/vehicles/VIN1"
    assert isinstance(exc_info.value.__cause__, aiohttp.ClientConnectionError)


@pytest.mark.asyncio
async def test_json_body_params_and_headers_are_sent() -> None:
    session = _StubSession(status=204)
    auth = aiohttp.BasicAuth("sync-bot@example.com", "TOKEN")
    transport = _transport(session, headers={"x-api-key": "KEY-123"}, auth=auth)

    await transport.request("PUT", "/rest/api/2/issue/1", params={"notifyUsers": "false"}, json_body={"fields": {}})

    call = session.calls[0]
    assert call["method"] == "PUT"
    assert json.loads(call["data"]) == {"fields": {}}
    assert call["params"] == {"notifyUsers": "false"}
    assert call["headers"]["content-type"].startswith("application/json")
    assert call["headers"]["x-api-key"] == "KEY-123"
    assert call["auth"] is auth


@pytest.mark.asyncio
async def test_debug_log_masks_credentials(caplog: pytest.LogCaptureFixture) -> None:
    session = _StubSession(text="{}")
    auth = aiohttp.BasicAuth("sync-bot@example.com", "TOKEN")
    transport = _transport(session, headers={"x-api-key": "KEY-123"}, auth=auth)

    with caplog.at_level(logging.DEBUG, logger="vinsync._transport"):
        await transport.request("GET", "/vehicles/VIN1")

    assert "KEY-123" not in caplog.text
    assert "TOKEN" not in caplog.text
    assert "auth=basic" in caplog.text
