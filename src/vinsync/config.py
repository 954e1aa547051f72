"""Run configuration for vinsync."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from vinsync._constants import DEFAULT_PAGE_SIZE
from vinsync.exceptions import VinSyncConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class TrackerFieldIds:
    """Custom-field ids on the issue tracker.

    The tracker stores VIN and enrichment values in instance-specific
    custom fields (``customfield_NNNNN``); these are configured per site.
    """

    vin: str = "customfield_10100"
    ceq_id: str = "customfield_10101"
    company_name: str = "customfield_10102"
    tdac: str = "customfield_10103"
    device_bundle_version: str = "customfield_10104"

    def all_ids(self) -> tuple[str, ...]:
        return tuple(dataclasses.astuple(self))


@dataclasses.dataclass(frozen=True)
class TelemetrySourceConfig:
    """Endpoint and credential for one telemetry data source.

    Parameters
    ----------
    base_url : str
        Provider API base URL, without trailing slash.
    api_key : str
        Provider key sent as ``x-api-key``.
    """

    base_url: str = ""
    api_key: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.api_key)


@dataclasses.dataclass(frozen=True)
class SyncConfig:
    """Sync run configuration.

    Parameters
    ----------
    tracker_base_url : str
        Issue tracker base URL (e.g. ``https://example.atlassian.net``).
    tracker_email : str
        Account email used for basic auth against the tracker.
    tracker_api_token : str
        API token paired with *tracker_email*.
    jql : str
        Query selecting the issues to enrich.
    primary : TelemetrySourceConfig
        Production telemetry source.
    secondary : TelemetrySourceConfig
        Non-production telemetry source. Optional; when unconfigured every
        secondary lookup is treated as absent.
    fields : TrackerFieldIds
        Custom-field ids on the tracker.
    page_size : int
        ``maxResults`` used for each search page.
    fetch_timeout : float
        Per-call timeout in seconds for each telemetry lookup.
    update_timeout : float
        Per-call timeout in seconds for each tracker update.
    max_concurrency : int
        Number of issues processed at the same time.
    dry_run : bool
        Compute and log updates without sending them.
    preflight_enabled : bool
        Run tracker capability checks before the main loop.
    """

    tracker_base_url: str = ""
    tracker_email: str = ""
    tracker_api_token: str = ""
    jql: str = 'project = FLEET AND "VIN" is not EMPTY'
    primary: TelemetrySourceConfig = dataclasses.field(default_factory=TelemetrySourceConfig)
    secondary: TelemetrySourceConfig = dataclasses.field(default_factory=TelemetrySourceConfig)
    fields: TrackerFieldIds = dataclasses.field(default_factory=TrackerFieldIds)
    page_size: int = DEFAULT_PAGE_SIZE
    fetch_timeout: float = 15.0
    update_timeout: float = 15.0
    max_concurrency: int = 4
    dry_run: bool = False
    preflight_enabled: bool = True

    def validate(self) -> None:
        """Raise :class:`VinSyncConfigError` when the run cannot start."""
        missing = [
            env_key
            for env_key, value in (
                ("VINSYNC_TRACKER_URL", self.tracker_base_url),
                ("VINSYNC_TRACKER_EMAIL", self.tracker_email),
                ("VINSYNC_TRACKER_API_TOKEN", self.tracker_api_token),
                ("VINSYNC_PRIMARY_URL", self.primary.base_url),
                ("VINSYNC_PRIMARY_API_KEY", self.primary.api_key),
            )
            if not value
        ]
        if missing:
            raise VinSyncConfigError(f"Missing required configuration: {', '.join(missing)}")
        if bool(self.secondary.base_url) != bool(self.secondary.api_key):
            raise VinSyncConfigError("Secondary source needs both VINSYNC_SECONDARY_URL and VINSYNC_SECONDARY_API_KEY")
        if not self.jql.strip():
            raise VinSyncConfigError("jql must be non-empty")
        if self.page_size <= 0:
            raise VinSyncConfigError(f"page_size must be positive, got {self.page_size}")
        if self.max_concurrency <= 0:
            raise VinSyncConfigError(f"max_concurrency must be positive, got {self.max_concurrency}")
        if self.fetch_timeout <= 0 or self.update_timeout <= 0:
            raise VinSyncConfigError("timeouts must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> SyncConfig:
        """Create configuration from ``VINSYNC_*`` environment variables.

        Explicit keyword arguments override environment values. The result
        is not validated; call :meth:`validate` before starting a run.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "VINSYNC_TRACKER_URL": "tracker_base_url",
            "VINSYNC_TRACKER_EMAIL": "tracker_email",
            "VINSYNC_TRACKER_API_TOKEN": "tracker_api_token",
            "VINSYNC_JQL": "jql",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for prefix, field_name in (("VINSYNC_PRIMARY", "primary"), ("VINSYNC_SECONDARY", "secondary")):
            if field_name in overrides:
                continue
            config_kwargs[field_name] = TelemetrySourceConfig(
                base_url=env.get(f"{prefix}_URL", "").rstrip("/"),
                api_key=env.get(f"{prefix}_API_KEY", ""),
            )

        field_kwargs: dict[str, str] = {}
        for field_name in (f.name for f in dataclasses.fields(TrackerFieldIds)):
            val = env.get(f"VINSYNC_FIELD_{field_name.upper()}")
            if val is not None:
                field_kwargs[field_name] = val
        field_overrides = overrides.pop("fields", None)
        if isinstance(field_overrides, dict):
            field_kwargs.update(field_overrides)
        elif isinstance(field_overrides, TrackerFieldIds):
            field_kwargs = dataclasses.asdict(field_overrides)
        config_kwargs["fields"] = TrackerFieldIds(**field_kwargs)

        numeric: dict[str, type] = {
            "VINSYNC_PAGE_SIZE": int,
            "VINSYNC_FETCH_TIMEOUT": float,
            "VINSYNC_UPDATE_TIMEOUT": float,
            "VINSYNC_MAX_CONCURRENCY": int,
        }
        for env_key, cast in numeric.items():
            field_name = env_key.removeprefix("VINSYNC_").lower()
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = cast(val)
            except ValueError as exc:
                raise VinSyncConfigError(f"{env_key} is not a valid number: {val!r}") from exc

        if "dry_run" not in overrides:
            config_kwargs["dry_run"] = _env_bool(env.get("VINSYNC_DRY_RUN"), False)
        if "preflight_enabled" not in overrides:
            config_kwargs["preflight_enabled"] = _env_bool(env.get("VINSYNC_PREFLIGHT"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
