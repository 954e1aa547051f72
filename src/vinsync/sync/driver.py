"""Per-issue sync loop: fetch → reconcile → map → gate → apply.

Every issue is processed independently; a failure scoped to one VIN is
recorded on that issue's result and never stops the run. Only a failing
pre-flight aborts before any issue is touched.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from vinsync._api.preflight import PreflightReport
from vinsync.ingestion.mapping import map_fields
from vinsync.models.issue import TrackedIssue
from vinsync.models.payload import UpdatePayload
from vinsync.models.telemetry import TelemetryRecord
from vinsync.sync.outcomes import IssueResult, SourceLabel, SyncOutcome, SyncReport, UpdateResult
from vinsync.sync.policy import reconcile, skip_reason

_logger = logging.getLogger(__name__)

FetchFn = Callable[[str], Awaitable[TelemetryRecord | None]]
ApplyFn = Callable[[str, UpdatePayload], Awaitable[UpdateResult]]
PreflightFn = Callable[[], Awaitable[PreflightReport | None]]


async def _absent(_vin: str) -> TelemetryRecord | None:
    return None


class IssueSyncDriver:
    """Runs the sync decision for a batch of tracked issues.

    Usage::

        driver = IssueSyncDriver(primary.fetch, secondary.fetch, tracker.apply_update)
        report = await driver.run(issues)

    Parameters
    ----------
    fetch_primary, fetch_secondary
        Telemetry lookups keyed by VIN. ``fetch_secondary`` may be ``None``
        when no secondary source is configured.
    apply_update
        Partial update of one issue by id.
    fetch_timeout, update_timeout
        Per-call timeouts in seconds. A timed-out fetch counts as absent; a
        timed-out update counts as failed.
    max_concurrency
        Issues processed at the same time. ``1`` processes strictly in order.
    dry_run
        Record gate-passing issues as updated without calling *apply_update*.
    preflight
        Awaited once before the first issue. An exception it raises, or a
        returned :class:`PreflightReport` with failures, aborts the run.
    """

    def __init__(
        self,
        fetch_primary: FetchFn,
        fetch_secondary: FetchFn | None,
        apply_update: ApplyFn,
        *,
        fetch_timeout: float = 15.0,
        update_timeout: float = 15.0,
        max_concurrency: int = 4,
        dry_run: bool = False,
        preflight: PreflightFn | None = None,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self._fetch_primary = fetch_primary
        self._fetch_secondary = fetch_secondary or _absent
        self._apply_update = apply_update
        self._fetch_timeout = fetch_timeout
        self._update_timeout = update_timeout
        self._max_concurrency = max_concurrency
        self._dry_run = dry_run
        self._preflight = preflight
        self._cancelled = False

    def cancel(self) -> None:
        """Stop starting new issues; in-flight issues finish normally."""
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    async def run(self, issues: Sequence[TrackedIssue]) -> SyncReport:
        """Process *issues* and return the report, in input order."""
        if self._preflight is not None:
            outcome = await self._preflight()
            if isinstance(outcome, PreflightReport):
                outcome.raise_for_failures()

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _guarded(issue: TrackedIssue) -> IssueResult | None:
            async with semaphore:
                if self._cancelled:
                    return None
                return await self.process_issue(issue)

        results = await asyncio.gather(*(_guarded(issue) for issue in issues))
        processed = [result for result in results if result is not None]
        if len(processed) < len(issues):
            _logger.info("Run cancelled: %d of %d issue(s) not started", len(issues) - len(processed), len(issues))

        report = SyncReport.from_results(processed)
        _logger.info("Sync finished: %s", report.summary())
        return report

    async def _fetch(self, fetch: FetchFn, vin: str, label: SourceLabel) -> tuple[TelemetryRecord | None, str | None]:
        """Run one lookup; any failure degrades to absent with an error message."""
        try:
            record = await asyncio.wait_for(fetch(vin), timeout=self._fetch_timeout)
        except TimeoutError:
            message = f"timed out after {self._fetch_timeout:g}s"
        except Exception as exc:  # noqa: BLE001
            message = str(exc) or type(exc).__name__
        else:
            return record, None
        _logger.warning("%s telemetry unavailable for VIN %s: %s", label.value, vin, message)
        return None, message

    async def _apply(self, issue: TrackedIssue, payload: UpdatePayload) -> UpdateResult:
        try:
            return await asyncio.wait_for(self._apply_update(issue.id, payload), timeout=self._update_timeout)
        except TimeoutError:
            return UpdateResult.failure(f"timed out after {self._update_timeout:g}s")
        except Exception as exc:  # noqa: BLE001
            _logger.debug("Update of %s raised", issue.key, exc_info=True)
            return UpdateResult.failure(str(exc) or type(exc).__name__)

    async def process_issue(self, issue: TrackedIssue) -> IssueResult:
        """Run the full decision for one issue."""
        base: dict[str, Any] = {"issue_id": issue.id, "issue_key": issue.key, "vin": issue.vin}

        if not issue.vin:
            _logger.info("%s: no VIN on issue, nothing to look up", issue.key)
            return IssueResult(**base, outcome=SyncOutcome.NO_DATA, reason="issue has no VIN")

        (primary, primary_error), (secondary, secondary_error) = await asyncio.gather(
            self._fetch(self._fetch_primary, issue.vin, SourceLabel.PRIMARY),
            self._fetch(self._fetch_secondary, issue.vin, SourceLabel.SECONDARY),
        )
        source_errors = {
            label: error
            for label, error in ((SourceLabel.PRIMARY, primary_error), (SourceLabel.SECONDARY, secondary_error))
            if error is not None
        }
        base["source_errors"] = source_errors

        chosen = reconcile(primary, secondary)
        if chosen is None:
            _logger.info("%s: no telemetry for VIN %s", issue.key, issue.vin)
            return IssueResult(**base, outcome=SyncOutcome.NO_DATA, reason="no telemetry from any source")

        payload = map_fields(chosen.record)
        reason = skip_reason(issue, payload)
        if reason is not None:
            _logger.info("%s: skipped (%s), source=%s", issue.key, reason.value, chosen.source.value)
            return IssueResult(**base, outcome=SyncOutcome.SKIPPED, source=chosen.source, reason=reason.value)

        entries = payload.entries()
        if self._dry_run:
            _logger.info("%s: would update %s from %s", issue.key, sorted(entries), chosen.source.value)
            return IssueResult(
                **base,
                outcome=SyncOutcome.UPDATED,
                source=chosen.source,
                update_fields=entries,
                dry_run=True,
            )

        result = await self._apply(issue, payload)
        if not result.ok:
            _logger.warning("%s: update rejected: %s", issue.key, result.reason)
            return IssueResult(
                **base,
                outcome=SyncOutcome.UPDATE_FAILED,
                source=chosen.source,
                update_fields=entries,
                reason=result.reason,
            )

        _logger.info("%s: updated %s from %s", issue.key, sorted(entries), chosen.source.value)
        return IssueResult(**base, outcome=SyncOutcome.UPDATED, source=chosen.source, update_fields=entries)


async def sync(
    issues: Sequence[TrackedIssue],
    fetch_primary: FetchFn,
    fetch_secondary: FetchFn | None,
    apply_update: ApplyFn,
    **options: Any,
) -> SyncReport:
    """Convenience wrapper: build an :class:`IssueSyncDriver` and run it once."""
    driver = IssueSyncDriver(fetch_primary, fetch_secondary, apply_update, **options)
    return await driver.run(issues)
