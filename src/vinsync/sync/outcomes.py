"""Per-issue sync outcomes and the run report.

The driver produces one :class:`IssueResult` per processed issue and folds
them into an immutable :class:`SyncReport`.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class SourceLabel(StrEnum):
    """Which telemetry source produced the authoritative record."""

    PRIMARY = "primary"
    SECONDARY = "secondary"


class SyncOutcome(StrEnum):
    NO_DATA = "no-data"
    SKIPPED = "skipped"
    UPDATED = "updated"
    UPDATE_FAILED = "update-failed"


class SkipReason(StrEnum):
    ALREADY_ENRICHED = "already-enriched"
    NO_NEW_FIELDS = "no-new-fields"


class UpdateResult(BaseModel):
    """Outcome of one partial-update call against the tracker."""

    model_config = ConfigDict(frozen=True)

    ok: bool
    reason: str = ""

    @classmethod
    def success(cls) -> UpdateResult:
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> UpdateResult:
        return cls(ok=False, reason=reason)


class IssueResult(BaseModel):
    """What happened to one tracked issue during a run."""

    model_config = ConfigDict(frozen=True)

    issue_id: str
    issue_key: str
    vin: str | None = None
    outcome: SyncOutcome
    source: SourceLabel | None = None
    update_fields: dict[str, str] = Field(default_factory=dict)
    reason: str = ""
    source_errors: dict[SourceLabel, str] = Field(
        default_factory=dict,
        description="Telemetry sources that were degraded to absent, with the failure message.",
    )
    dry_run: bool = False


class SyncReport(BaseModel):
    """Immutable summary of a sync run."""

    model_config = ConfigDict(frozen=True)

    results: tuple[IssueResult, ...] = ()
    counts: dict[SyncOutcome, int] = Field(default_factory=lambda: {outcome: 0 for outcome in SyncOutcome})

    @classmethod
    def from_results(cls, results: Iterable[IssueResult]) -> SyncReport:
        collected = tuple(results)
        counts = {outcome: 0 for outcome in SyncOutcome}
        for result in collected:
            counts[result.outcome] += 1
        return cls(results=collected, counts=counts)

    def count(self, outcome: SyncOutcome) -> int:
        return self.counts.get(outcome, 0)

    def by_outcome(self, outcome: SyncOutcome) -> tuple[IssueResult, ...]:
        return tuple(result for result in self.results if result.outcome == outcome)

    def summary(self) -> str:
        return ", ".join(f"{outcome.value}={self.count(outcome)}" for outcome in SyncOutcome)
