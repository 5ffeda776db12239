"""Engine Configuration: tests for settings defaults and environment overrides."""

import pytest
from pydantic import ValidationError

from license_engine.config import Settings, get_settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.catalog_path is None
    assert settings.capture_duplicate_policy == "exact"
    assert settings.log_level == "INFO"
    assert settings.log_format == "json"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("CAPTURE_DUPLICATE_POLICY", "closure")
    monkeypatch.setenv("CATALOG_PATH", "/etc/license/catalog.json")
    settings = Settings(_env_file=None)
    assert settings.capture_duplicate_policy == "closure"
    assert settings.catalog_path == "/etc/license/catalog.json"


def test_blank_catalog_path_is_none(monkeypatch):
    monkeypatch.setenv("CATALOG_PATH", "  ")
    assert Settings(_env_file=None).catalog_path is None


def test_unknown_policy_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, capture_duplicate_policy="fuzzy")


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
