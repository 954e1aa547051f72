"""Partial update payload for a tracked issue."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from vinsync.config import TrackerFieldIds


class UpdatePayload(BaseModel):
    """Fields to write to a tracked issue.

    Only present entries are written; an entry is present when it is not
    ``None``. An empty payload is never sent to the tracker.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ceq_id: str | None = None
    company_name: str | None = None
    tdac: str | None = None
    device_bundle_version: str | None = None

    def entries(self) -> dict[str, str]:
        return self.model_dump(exclude_none=True)

    def __len__(self) -> int:
        return len(self.entries())

    @property
    def is_empty(self) -> bool:
        return not self.entries()

    def to_tracker_fields(self, fields: TrackerFieldIds) -> dict[str, Any]:
        """Render entries under the tracker's custom-field ids."""
        return {getattr(fields, name): value for name, value in self.entries().items()}
