"""Base model for telemetry provider responses.

Every provider response model inherits from :class:`VinSyncBaseModel`
which provides:

* ``alias_generator=to_camel`` so camelCase API keys map
  automatically to snake_case fields.
* A ``model_validator(mode="before")`` that strips provider sentinel
  values (``""``, ``"--"``, NaN, ``None``) so the field default is used.
* A ``raw`` dict that captures the original payload.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Sentinel strings providers use for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan", "null", "N/A"})


class VinSyncBaseModel(BaseModel):
    """Base for provider response models.

    Handles:
    * camelCase → snake_case via ``alias_generator=to_camel``
    * sentinel values → dropped so the field default is used instead
    * Stashes the original API dict in ``raw``
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)
    """Original API response dict."""

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and value.strip() in _SENTINELS:
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        """Strip sentinel values and stash the raw payload."""
        if not isinstance(values, dict):
            return values
        cleaned = VinSyncBaseModel._clean_dict(values)

        # Only auto-stash raw when not explicitly provided (model_validate from
        # an API dict). Keyword construction with raw= keeps the caller's value.
        if "raw" not in values:
            cleaned["raw"] = dict(values)
        return cleaned
