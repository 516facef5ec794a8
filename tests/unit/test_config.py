"""
Tests for consultancy.utils.config — settings defaults, env overrides, validation.
"""

import pytest
from pydantic import ValidationError

from consultancy.utils.config import (
    AppSettings,
    AutoSaveSettings,
    DatabaseSettings,
    get_settings,
    reload_settings,
)


class TestAutoSaveSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("AUTOSAVE_DEBOUNCE_WINDOW_MS", raising=False)
        monkeypatch.delenv("AUTOSAVE_ENABLED", raising=False)
        settings = AutoSaveSettings()

        assert settings.debounce_window_ms == 2000
        assert settings.enabled is True
        assert settings.debounce_window_seconds == 2.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("AUTOSAVE_DEBOUNCE_WINDOW_MS", "750")
        monkeypatch.setenv("AUTOSAVE_ENABLED", "false")
        settings = AutoSaveSettings()

        assert settings.debounce_window_ms == 750
        assert settings.enabled is False
        assert settings.debounce_window_seconds == 0.75

    @pytest.mark.parametrize("window", [0, -1])
    def test_non_positive_window_rejected(self, window):
        with pytest.raises(ValidationError, match="must be > 0"):
            AutoSaveSettings(debounce_window_ms=window)


class TestAppSettings:
    def test_environment_from_conftest(self):
        assert reload_settings().environment == "testing"

    def test_nested_sections(self):
        settings = AppSettings()
        assert isinstance(settings.autosave, AutoSaveSettings)
        assert isinstance(settings.database, DatabaseSettings)
        assert settings.database.drafts_collection == "drafts"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reload_replaces_instance(self):
        first = get_settings()
        assert reload_settings() is not first
