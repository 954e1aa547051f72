"""One complete sync run: config → pre-flight → search → per-issue sync."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import signal

from vinsync.client import IssueTrackerClient, TelemetryClient
from vinsync.config import SyncConfig
from vinsync.sync.driver import IssueSyncDriver
from vinsync.sync.outcomes import SyncReport

_logger = logging.getLogger(__name__)


async def run_sync(
    config: SyncConfig,
    *,
    tracker: IssueTrackerClient | None = None,
    primary: TelemetryClient | None = None,
    secondary: TelemetryClient | None = None,
    handle_signals: bool = False,
) -> SyncReport:
    """Run a full sync with *config*.

    Clients default to ones built from *config*; pass them explicitly to
    reuse sessions or substitute transports.

    Raises
    ------
    VinSyncConfigError
        Configuration is incomplete; nothing was contacted.
    PreflightError
        The tracker failed a capability check; no issue was processed.
    """
    config.validate()

    if secondary is None and config.secondary.is_configured:
        secondary = TelemetryClient(config.secondary, label="secondary")

    async with contextlib.AsyncExitStack() as stack:
        tracker = await stack.enter_async_context(tracker or IssueTrackerClient.from_config(config))
        primary = await stack.enter_async_context(primary or TelemetryClient(config.primary, label="primary"))
        if secondary is not None:
            secondary = await stack.enter_async_context(secondary)
        else:
            _logger.info("No secondary telemetry source configured")

        if config.preflight_enabled:
            (await tracker.preflight()).raise_for_failures()

        issues = await tracker.search_issues(config.jql)

        driver = IssueSyncDriver(
            primary.fetch,
            secondary.fetch if secondary is not None else None,
            tracker.apply_update,
            fetch_timeout=config.fetch_timeout,
            update_timeout=config.update_timeout,
            max_concurrency=config.max_concurrency,
            dry_run=config.dry_run,
        )

        if handle_signals:
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                # Not available on Windows event loops.
                with contextlib.suppress(NotImplementedError):
                    loop.add_signal_handler(sig, driver.cancel)
            stack.callback(_remove_signal_handlers, loop)

        return await driver.run(issues)


def _remove_signal_handlers(loop: asyncio.AbstractEventLoop) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(sig)
