"""Tracked issue model."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from vinsync.config import TrackerFieldIds
from vinsync.ingestion.normalize import is_meaningful, safe_str


def _field_text(value: Any) -> str | None:
    """Flatten a tracker field value to text.

    Select-list style custom fields arrive as ``{"value": ...}`` or
    ``{"name": ...}`` objects rather than bare strings.
    """
    if isinstance(value, Mapping):
        for key in ("value", "name", "displayName"):
            text = safe_str(value.get(key))
            if text is not None:
                return text
        return None
    if isinstance(value, list):
        return _field_text(value[0]) if value else None
    return safe_str(value)


class TrackedIssue(BaseModel):
    """One issue-tracker record to enrich.

    Read-only input to the sync decision; the remote tracker is the only
    mutation target.

    Parameters
    ----------
    id : str
        Tracker-internal issue id (used for updates).
    key : str
        Human-readable issue key (e.g. ``FLEET-42``).
    vin : str or None
        Vehicle identification number, ``None`` when the field is empty.
    company_name_already_set : bool
        Whether the company-name field already holds a value.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    id: str
    key: str
    vin: str | None = None
    company_name_already_set: bool = False

    @field_validator("vin", mode="before")
    @classmethod
    def _normalize_vin(cls, value: Any) -> str | None:
        text = safe_str(value)
        return text.upper() if text else None

    @classmethod
    def from_tracker(cls, issue: Mapping[str, Any], fields: TrackerFieldIds) -> TrackedIssue:
        """Build from a search-result issue object."""
        issue_fields = issue.get("fields")
        values: Mapping[str, Any] = issue_fields if isinstance(issue_fields, Mapping) else {}
        return cls(
            id=str(issue.get("id", "")),
            key=str(issue.get("key", "")),
            vin=_field_text(values.get(fields.vin)),
            company_name_already_set=is_meaningful(_field_text(values.get(fields.company_name))),
        )
