"""Pre-flight capability checks against the issue tracker.

Run once before the sync loop: credentials work, the account may browse
and edit issues, and every configured custom-field id exists.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from vinsync._constants import FIELDS_ENDPOINT, MY_PERMISSIONS_ENDPOINT, MYSELF_ENDPOINT, REQUIRED_PERMISSIONS
from vinsync._transport import Transport
from vinsync.config import TrackerFieldIds
from vinsync.exceptions import PreflightError, VinSyncTransportError

_logger = logging.getLogger(__name__)


class PreflightReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    account: str | None = None
    missing_permissions: tuple[str, ...] = ()
    missing_fields: tuple[str, ...] = ()
    failures: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise PreflightError(f"Pre-flight failed: {'; '.join(self.failures)}", failures=self.failures)


async def check_auth(transport: Transport) -> str:
    """Return the authenticated account name."""
    response = await transport.request("GET", MYSELF_ENDPOINT)
    if response.status != 200 or not isinstance(response.body, dict):
        raise VinSyncTransportError(
            f"Authentication check failed with HTTP {response.status}",
            status_code=response.status,
            endpoint=MYSELF_ENDPOINT,
        )
    body = response.body
    return str(body.get("emailAddress") or body.get("displayName") or body.get("accountId") or "")


async def check_permissions(transport: Transport, required: tuple[str, ...] = REQUIRED_PERMISSIONS) -> tuple[str, ...]:
    """Return the permissions from *required* the account does not hold."""
    response = await transport.request(
        "GET",
        MY_PERMISSIONS_ENDPOINT,
        params={"permissions": ",".join(required)},
    )
    if response.status != 200 or not isinstance(response.body, dict):
        raise VinSyncTransportError(
            f"Permission check failed with HTTP {response.status}",
            status_code=response.status,
            endpoint=MY_PERMISSIONS_ENDPOINT,
        )
    granted: dict[str, Any] = response.body.get("permissions") or {}
    missing = []
    for name in required:
        entry = granted.get(name)
        if not (isinstance(entry, dict) and entry.get("havePermission")):
            missing.append(name)
    return tuple(missing)


async def check_fields(transport: Transport, fields: TrackerFieldIds) -> tuple[str, ...]:
    """Return the configured field ids the tracker does not know."""
    response = await transport.request("GET", FIELDS_ENDPOINT)
    if response.status != 200 or not isinstance(response.body, list):
        raise VinSyncTransportError(
            f"Field listing failed with HTTP {response.status}",
            status_code=response.status,
            endpoint=FIELDS_ENDPOINT,
        )
    known = {str(item.get("id")) for item in response.body if isinstance(item, dict)}
    return tuple(field_id for field_id in fields.all_ids() if field_id not in known)


async def run_preflight(transport: Transport, fields: TrackerFieldIds) -> PreflightReport:
    """Run every check; a failing check is reported, not raised."""
    failures: list[str] = []
    account: str | None = None
    missing_permissions: tuple[str, ...] = ()
    missing_fields: tuple[str, ...] = ()

    try:
        account = await check_auth(transport)
    except VinSyncTransportError as exc:
        # Without working credentials the remaining checks are meaningless.
        return PreflightReport(failures=(f"auth: {exc}",))

    try:
        missing_permissions = await check_permissions(transport)
    except VinSyncTransportError as exc:
        failures.append(f"permissions: {exc}")
    else:
        if missing_permissions:
            failures.append(f"permissions: missing {', '.join(missing_permissions)}")

    try:
        missing_fields = await check_fields(transport, fields)
    except VinSyncTransportError as exc:
        failures.append(f"fields: {exc}")
    else:
        if missing_fields:
            failures.append(f"fields: unknown {', '.join(missing_fields)}")

    _logger.info(
        "Pre-flight as %s: %s",
        account or "<unknown>",
        "ok" if not failures else "; ".join(failures),
    )
    return PreflightReport(
        account=account,
        missing_permissions=missing_permissions,
        missing_fields=missing_fields,
        failures=tuple(failures),
    )
