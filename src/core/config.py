"""Pydantic settings loaded from YAML configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, SecretStr

from src.core.types import SortDirection, SortField, ViewMode

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")


class BackendConfig(BaseModel):
    """Alerting backend HTTP API configuration."""

    base_url: str = "http://localhost:9200/_plugins/_alerting"
    alerts_path: str = "/alerts"
    monitors_search_path: str = "/monitors/_search"
    acknowledge_path: str = "/monitors/{monitor_id}/_acknowledge/alerts"
    timeout_secs: float = 10.0
    # Opaque tenant / security scoping token, forwarded as-is.
    scoping_token: SecretStr = SecretStr("")
    scoping_header: str = "securitytenant"


class DebounceConfig(BaseModel):
    """Fetch debounce window for query-state changes."""

    window_secs: float = Field(default=0.5, ge=0.0)
    leading_edge: bool = True
    trailing_reconcile: bool = True


class ViewDefaults(BaseModel):
    """Defaults applied for a view mode when the URL omits a key."""

    size: int = Field(default=20, gt=0)
    sort_field: SortField = SortField.START_TIME
    sort_direction: SortDirection = SortDirection.DESC


class ViewsConfig(BaseModel):
    """Per-view-mode defaults."""

    default_view_mode: ViewMode = ViewMode.PER_ALERT
    per_alert: ViewDefaults = ViewDefaults()
    # The trigger view pulls a whole result window in one page to aggregate it.
    per_trigger: ViewDefaults = ViewDefaults(size=10000)

    def defaults_for(self, mode: ViewMode) -> ViewDefaults:
        return self.per_trigger if mode == ViewMode.PER_TRIGGER else self.per_alert


class WebhookConfig(BaseModel):
    """Generic JSON webhook for error notifications."""

    enabled: bool = False
    url: SecretStr = SecretStr("")


class NotificationsConfig(BaseModel):
    """Side-channel notification configuration."""

    throttle_secs: float = 5.0
    history_size: int = 50
    webhook: WebhookConfig = WebhookConfig()


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["json", "console"] = "json"
    # Per-request loggers of the HTTP stacks.
    quiet_loggers: list[str] = Field(
        default_factory=lambda: ["httpx", "httpcore", "aiohttp.access"],
    )


class Settings(BaseModel):
    """Root settings container."""

    backend: BackendConfig = BackendConfig()
    debounce: DebounceConfig = DebounceConfig()
    views: ViewsConfig = ViewsConfig()
    notifications: NotificationsConfig = NotificationsConfig()
    logging: LoggingConfig = LoggingConfig()


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file and cache globally.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
