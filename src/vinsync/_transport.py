"""JSON-over-HTTP transport shared by the tracker and telemetry clients."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, NamedTuple, Protocol

import aiohttp

from vinsync._constants import USER_AGENT
from vinsync._redact import redact_mapping, summarize_body
from vinsync.exceptions import VinSyncTransportError

_logger = logging.getLogger(__name__)


class HttpResponse(NamedTuple):
    status: int
    body: Any
    text: str


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`JsonTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        ...


class JsonTransport:
    """HTTP transport bound to one base URL and one set of auth headers.

    Status handling is left to the endpoint modules; this layer only raises
    for network failures and undecodable bodies.
    """

    def __init__(
        self,
        base_url: str,
        http_session: aiohttp.ClientSession,
        *,
        headers: Mapping[str, str] | None = None,
        auth: aiohttp.BasicAuth | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http_session
        self._headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
            **(headers or {}),
        }
        self._auth = auth

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        url = f"{self._base_url}{endpoint}"
        headers = dict(self._headers)
        data: str | None = None
        if json_body is not None:
            headers["content-type"] = "application/json; charset=UTF-8"
            data = json.dumps(json_body, separators=(",", ":"))

        _logger.debug(
            "%s %s params=%s headers=%s auth=%s body=%s",
            method,
            url,
            redact_mapping(params),
            redact_mapping(headers),
            "basic" if self._auth is not None else "-",
            summarize_body(json_body),
        )

        try:
            async with self._http.request(
                method,
                url,
                params=dict(params) if params else None,
                data=data,
                headers=headers,
                auth=self._auth,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise VinSyncTransportError(
                f"{method} {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        _logger.debug("%s %s -> HTTP %d (%d bytes)", method, url, status, len(text))

        if not text.strip():
            return HttpResponse(status, None, text)

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            if status >= 400:
                # Error pages are often HTML; callers still need the status.
                return HttpResponse(status, None, text)
            raise VinSyncTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        return HttpResponse(status, body, text)
