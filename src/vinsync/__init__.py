"""vinsync - Enrich issue-tracker records with fleet telemetry, keyed by VIN."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("vinsync")
except PackageNotFoundError:
    __version__ = "0+local"
from vinsync.client import IssueTrackerClient, TelemetryClient
from vinsync.config import SyncConfig, TelemetrySourceConfig, TrackerFieldIds
from vinsync.exceptions import (
    PreflightError,
    SourceUnavailableError,
    UpdateRejectedError,
    VinSyncConfigError,
    VinSyncError,
    VinSyncTransportError,
)
from vinsync.ingestion.mapping import map_fields
from vinsync.models import Devices, Position, TelemetryRecord, TrackedIssue, UpdatePayload
from vinsync.runner import run_sync
from vinsync.sync.driver import IssueSyncDriver, sync
from vinsync.sync.outcomes import IssueResult, SkipReason, SourceLabel, SyncOutcome, SyncReport, UpdateResult
from vinsync.sync.policy import Reconciled, reconcile, should_update

__all__ = [
    "__version__",
    "Devices",
    "IssueResult",
    "IssueSyncDriver",
    "IssueTrackerClient",
    "Position",
    "PreflightError",
    "Reconciled",
    "SkipReason",
    "SourceLabel",
    "SourceUnavailableError",
    "SyncConfig",
    "SyncOutcome",
    "SyncReport",
    "TelemetryClient",
    "TelemetryRecord",
    "TelemetrySourceConfig",
    "TrackedIssue",
    "TrackerFieldIds",
    "UpdatePayload",
    "UpdateRejectedError",
    "UpdateResult",
    "VinSyncConfigError",
    "VinSyncError",
    "VinSyncTransportError",
    "map_fields",
    "reconcile",
    "run_sync",
    "should_update",
    "sync",
]
