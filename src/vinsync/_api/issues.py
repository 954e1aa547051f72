"""Issue tracker endpoints: JQL search and partial field update.

Endpoints:
  - /rest/api/2/search (POST, paginated by startAt/maxResults)
  - /rest/api/2/issue/{id} (PUT)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from vinsync._constants import ISSUE_ENDPOINT, SEARCH_ENDPOINT
from vinsync._transport import Transport
from vinsync.config import TrackerFieldIds
from vinsync.exceptions import UpdateRejectedError, VinSyncTransportError
from vinsync.models.issue import TrackedIssue
from vinsync.models.payload import UpdatePayload
from vinsync.sync.outcomes import UpdateResult

_logger = logging.getLogger(__name__)


def fold_search_page(
    collected: tuple[TrackedIssue, ...],
    page: Mapping[str, Any],
    fields: TrackerFieldIds,
) -> tuple[TrackedIssue, ...]:
    """Return *collected* extended with the issues of one search page."""
    raw_issues = page.get("issues")
    issues = raw_issues if isinstance(raw_issues, list) else []
    return collected + tuple(TrackedIssue.from_tracker(item, fields) for item in issues if isinstance(item, Mapping))


def collect_pages(pages: Iterable[Mapping[str, Any]], fields: TrackerFieldIds) -> tuple[TrackedIssue, ...]:
    """Fold already-fetched search pages into one immutable issue list."""
    collected: tuple[TrackedIssue, ...] = ()
    for page in pages:
        collected = fold_search_page(collected, page, fields)
    return collected


def _next_start(page: Mapping[str, Any], start_at: int) -> int | None:
    """Offset of the following page, or ``None`` when this was the last one."""
    raw_issues = page.get("issues")
    count = len(raw_issues) if isinstance(raw_issues, list) else 0
    if count == 0:
        return None
    next_start = start_at + count
    total = page.get("total")
    if isinstance(total, int) and next_start >= total:
        return None
    return next_start


async def search_issues(
    transport: Transport,
    jql: str,
    fields: TrackerFieldIds,
    *,
    page_size: int,
) -> tuple[TrackedIssue, ...]:
    """Run *jql* and return every matching issue across all pages."""
    collected: tuple[TrackedIssue, ...] = ()
    start_at: int | None = 0
    while start_at is not None:
        body = {
            "jql": jql,
            "startAt": start_at,
            "maxResults": page_size,
            "fields": [fields.vin, fields.company_name],
        }
        response = await transport.request("POST", SEARCH_ENDPOINT, json_body=body)
        if response.status != 200 or not isinstance(response.body, dict):
            raise VinSyncTransportError(
                f"HTTP {response.status} from {SEARCH_ENDPOINT}: {response.text[:200]}",
                status_code=response.status,
                endpoint=SEARCH_ENDPOINT,
            )
        collected = fold_search_page(collected, response.body, fields)
        _logger.debug("Search page at %d: %d issue(s) collected so far", start_at, len(collected))
        start_at = _next_start(response.body, start_at)
    return collected


def _rejection_reason(status: int, body: Any, text: str) -> str:
    if isinstance(body, dict):
        messages = [str(m) for m in body.get("errorMessages") or []]
        errors = body.get("errors")
        if isinstance(errors, dict):
            messages.extend(f"{k}: {v}" for k, v in errors.items())
        if messages:
            return f"HTTP {status}: {'; '.join(messages)}"
    return f"HTTP {status}: {text[:200]}" if text else f"HTTP {status}"


async def update_issue(
    transport: Transport,
    issue_id: str,
    payload: UpdatePayload,
    fields: TrackerFieldIds,
) -> None:
    """Write *payload* to the issue; raises :class:`UpdateRejectedError` on refusal."""
    if payload.is_empty:
        raise ValueError("refusing to send an empty update")
    endpoint = ISSUE_ENDPOINT.format(issue_id=issue_id)
    try:
        response = await transport.request("PUT", endpoint, json_body={"fields": payload.to_tracker_fields(fields)})
    except VinSyncTransportError as exc:
        raise UpdateRejectedError(str(exc), status_code=exc.status_code, endpoint=endpoint) from exc
    if response.status not in (200, 204):
        raise UpdateRejectedError(
            _rejection_reason(response.status, response.body, response.text),
            status_code=response.status,
            endpoint=endpoint,
        )


async def apply_update(
    transport: Transport,
    issue_id: str,
    payload: UpdatePayload,
    fields: TrackerFieldIds,
) -> UpdateResult:
    """Like :func:`update_issue`, but reports refusal as a failed result."""
    try:
        await update_issue(transport, issue_id, payload, fields)
    except UpdateRejectedError as exc:
        return UpdateResult.failure(str(exc))
    return UpdateResult.success()
