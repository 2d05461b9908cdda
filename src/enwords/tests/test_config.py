"""Tests for configuration settings."""
from pathlib import Path

import pytest

from enwords.config import (
    DEFAULT_CATALOG_PATH,
    CatalogSettings,
    DatabaseSettings,
    LoggingSettings,
    MonitoringSettings,
    Settings,
    ensure_directories,
    settings,
)


def test_test_environment_loaded() -> None:
    """Test the test environment file was applied."""
    assert settings.database.url == "sqlite:///:memory:"
    assert settings.monitoring.metrics_port == 0


def test_default_catalog_path() -> None:
    """Test the bundled catalog is used when CATALOG_PATH is not set."""
    assert DEFAULT_CATALOG_PATH.exists()


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Test that settings can be overridden by environment variables."""
    monkeypatch.setenv("DATABASE_URL", "sqlite:///other.db")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("CATALOG_PATH", str(tmp_path / "words.json"))
    monkeypatch.setenv("METRICS_PORT", "9100")

    test_settings = Settings()

    assert test_settings.database.url == "sqlite:///other.db"
    assert test_settings.logging.level == "WARNING"
    assert test_settings.catalog.path == tmp_path / "words.json"
    assert test_settings.monitoring.metrics_port == 9100
    test_settings.validate()


def test_empty_catalog_path_uses_default(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test a blank CATALOG_PATH falls back to the bundled catalog."""
    monkeypatch.setenv("CATALOG_PATH", "")
    assert CatalogSettings().path == DEFAULT_CATALOG_PATH


@pytest.mark.parametrize(
    "overrides",
    [
        {"database": DatabaseSettings(url="")},
        {"logging": LoggingSettings(level="LOUD")},
        {"logging": LoggingSettings(backup_count=-1)},
        {"monitoring": MonitoringSettings(metrics_port=-5)},
    ],
)
def test_validate_rejects_bad_values(overrides) -> None:
    """Test invalid settings are reported."""
    with pytest.raises(ValueError):
        Settings(**overrides).validate()


def test_ensure_directories() -> None:
    """Test that all required directories exist."""
    ensure_directories()
    assert settings.paths.data_dir.exists()
    assert settings.paths.backups_dir.exists()
