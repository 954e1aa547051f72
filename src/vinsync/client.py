"""High-level async clients for the telemetry provider and the issue tracker."""

from __future__ import annotations

import abc
import logging
from typing import Any, Self

import aiohttp

from vinsync._api import issues as _issues_api
from vinsync._api import preflight as _preflight_api
from vinsync._api import telemetry as _telemetry_api
from vinsync._constants import DEFAULT_PAGE_SIZE
from vinsync._transport import JsonTransport, Transport
from vinsync.config import SyncConfig, TelemetrySourceConfig, TrackerFieldIds
from vinsync.exceptions import VinSyncError
from vinsync.models.issue import TrackedIssue
from vinsync.models.payload import UpdatePayload
from vinsync.models.telemetry import TelemetryRecord
from vinsync.sync.outcomes import UpdateResult

_logger = logging.getLogger(__name__)


class _SessionOwner(abc.ABC):
    """Shared ``async with`` lifecycle for clients that own an HTTP session."""

    def __init__(self, *, session: aiohttp.ClientSession | None = None, transport: Transport | None = None) -> None:
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None

    @abc.abstractmethod
    def _build_transport(self, http_session: aiohttp.ClientSession) -> Transport:
        ...

    async def __aenter__(self) -> Self:
        if self._external_transport:
            return self
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        self._transport = self._build_transport(self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise VinSyncError(f"Client not initialized. Use 'async with {type(self).__name__}(...) as client:'")
        return self._transport


class TelemetryClient(_SessionOwner):
    """Lookup client for one telemetry data source.

    Usage::

        async with TelemetryClient(config.primary, label="primary") as primary:
            record = await primary.fetch("1FTFW1ET5DFC10312")
    """

    def __init__(
        self,
        source: TelemetrySourceConfig,
        *,
        label: str = "",
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        super().__init__(session=session, transport=transport)
        self._source = source
        self.label = label

    def _build_transport(self, http_session: aiohttp.ClientSession) -> Transport:
        return JsonTransport(self._source.base_url, http_session, headers={"x-api-key": self._source.api_key})

    async def fetch(self, vin: str) -> TelemetryRecord | None:
        """Return the provider's record for *vin*, ``None`` when unknown.

        Raises :class:`~vinsync.exceptions.SourceUnavailableError` when the
        provider cannot answer.
        """
        return await _telemetry_api.fetch_telemetry(self._require_transport(), vin, source=self.label)


class IssueTrackerClient(_SessionOwner):
    """Search and partial-update client for the issue tracker.

    Usage::

        async with IssueTrackerClient.from_config(config) as tracker:
            issues = await tracker.search_issues(config.jql)
    """

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        *,
        fields: TrackerFieldIds | None = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        super().__init__(session=session, transport=transport)
        self._base_url = base_url
        self._auth = aiohttp.BasicAuth(email, api_token)
        self.fields = fields or TrackerFieldIds()
        self._page_size = page_size

    @classmethod
    def from_config(cls, config: SyncConfig, **kwargs: Any) -> IssueTrackerClient:
        return cls(
            config.tracker_base_url,
            config.tracker_email,
            config.tracker_api_token,
            fields=config.fields,
            page_size=config.page_size,
            **kwargs,
        )

    def _build_transport(self, http_session: aiohttp.ClientSession) -> Transport:
        return JsonTransport(self._base_url, http_session, auth=self._auth)

    async def search_issues(self, jql: str) -> tuple[TrackedIssue, ...]:
        """Return every issue matching *jql*, across all result pages."""
        issues = await _issues_api.search_issues(
            self._require_transport(),
            jql,
            self.fields,
            page_size=self._page_size,
        )
        _logger.info("Found %d issue(s) for query", len(issues))
        return issues

    async def apply_update(self, issue_id: str, payload: UpdatePayload) -> UpdateResult:
        """Write *payload* to the issue; a refusal is returned, not raised."""
        return await _issues_api.apply_update(self._require_transport(), issue_id, payload, self.fields)

    async def preflight(self) -> _preflight_api.PreflightReport:
        """Check credentials, permissions and configured field ids."""
        return await _preflight_api.run_preflight(self._require_transport(), self.fields)
