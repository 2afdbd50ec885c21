"""Tests for src/core/config.py — YAML loading, defaults, SecretStr."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.core.config import (
    BackendConfig,
    DebounceConfig,
    LoggingConfig,
    Settings,
    ViewsConfig,
    get_settings,
    load_settings,
    reset_settings,
)
from src.core.types import SortDirection, SortField, ViewMode


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()


class TestDefaults:
    """Settings should have sensible defaults when no YAML is provided."""

    def test_default_backend_config(self) -> None:
        cfg = BackendConfig()
        assert cfg.alerts_path == "/alerts"
        assert cfg.monitors_search_path == "/monitors/_search"
        assert cfg.scoping_token.get_secret_value() == ""

    def test_default_debounce_config(self) -> None:
        cfg = DebounceConfig()
        assert cfg.window_secs == 0.5
        assert cfg.leading_edge is True
        assert cfg.trailing_reconcile is True

    def test_default_view_sizes_differ_by_mode(self) -> None:
        cfg = ViewsConfig()
        assert cfg.defaults_for(ViewMode.PER_ALERT).size == 20
        assert cfg.defaults_for(ViewMode.PER_TRIGGER).size == 10000

    def test_default_sort(self) -> None:
        cfg = ViewsConfig()
        for mode in ViewMode:
            assert cfg.defaults_for(mode).sort_field == SortField.START_TIME
            assert cfg.defaults_for(mode).sort_direction == SortDirection.DESC

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "json"

    def test_default_settings(self) -> None:
        s = Settings()
        assert s.views.default_view_mode == ViewMode.PER_ALERT
        assert s.notifications.webhook.enabled is False
        assert s.logging.level == "INFO"

    def test_negative_window_rejected(self) -> None:
        with pytest.raises(ValidationError):
            DebounceConfig(window_secs=-1)


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "backend": {
                "base_url": "https://search.internal:9200/_plugins/_alerting",
                "scoping_token": "tenant-a",
                "timeout_secs": 3,
            },
            "debounce": {"window_secs": 0.25, "trailing_reconcile": False},
            "views": {
                "default_view_mode": "per_trigger",
                "per_alert": {"size": 50, "sort_field": "monitor_name", "sort_direction": "asc"},
            },
            "logging": {"level": "DEBUG", "format": "console"},
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        settings = load_settings(config_file)

        assert settings.backend.base_url.startswith("https://search.internal")
        assert settings.backend.scoping_token.get_secret_value() == "tenant-a"
        assert settings.backend.timeout_secs == 3
        assert settings.debounce.window_secs == 0.25
        assert settings.debounce.trailing_reconcile is False
        assert settings.views.default_view_mode == ViewMode.PER_TRIGGER
        assert settings.views.per_alert.size == 50
        assert settings.views.per_alert.sort_field == SortField.MONITOR_NAME
        assert settings.logging.format == "console"

    def test_load_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml")
        assert settings.debounce.window_secs == 0.5

    def test_load_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        settings = load_settings(config_file)
        assert settings.views.per_trigger.size == 10000

    def test_partial_yaml_merges_with_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"views": {"per_trigger": {"size": 500}}}))

        settings = load_settings(config_file)
        assert settings.views.per_trigger.size == 500
        # Other defaults still intact
        assert settings.views.per_alert.size == 20
        assert settings.backend.alerts_path == "/alerts"

    def test_get_settings_caches(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"debounce": {"window_secs": 1.5}}))
        loaded = load_settings(config_file)
        assert get_settings() is loaded


class TestSecretStr:
    """The scoping token should not leak through repr."""

    def test_secret_str_repr_does_not_leak(self) -> None:
        cfg = BackendConfig(scoping_token="tenant-secret")  # type: ignore[arg-type]
        assert "tenant-secret" not in repr(cfg)
        assert "**********" in repr(cfg)
