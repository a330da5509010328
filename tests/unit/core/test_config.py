"""Unit tests for configuration loading."""

from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from gridbase.core.config import Settings, get_settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GRIDBASE_DEFAULT_TIMEZONE", raising=False)
        settings = Settings(_env_file=None)
        assert settings.app_name == "GridBase"
        assert settings.default_timezone == "UTC"
        assert settings.new_column_name == "New Column"
        assert settings.min_column_width == 50

    def test_env_prefix_override(self, monkeypatch):
        monkeypatch.setenv("GRIDBASE_DEFAULT_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("GRIDBASE_MAX_BULK_ITEMS", "25")
        settings = Settings(_env_file=None)
        assert settings.timezone == ZoneInfo("Europe/Berlin")
        assert settings.max_bulk_items == 25

    def test_unknown_timezone_rejected(self):
        with pytest.raises(ValidationError, match="Unknown timezone"):
            Settings(_env_file=None, default_timezone="Mars/Olympus")

    def test_column_width_bounds(self):
        with pytest.raises(ValidationError, match="Column width bounds"):
            Settings(_env_file=None, min_column_width=300, max_column_width=100)

    def test_sqlite_rejects_multiple_workers(self):
        with pytest.raises(ValidationError, match="SQLite does not support"):
            Settings(_env_file=None, workers=4)

    def test_postgres_allows_multiple_workers(self):
        settings = Settings(
            _env_file=None,
            workers=4,
            database_url="postgresql+asyncpg://u:p@localhost/gridbase",
        )
        assert settings.workers == 4

    def test_cors_origins_from_string(self):
        settings = Settings(_env_file=None, cors_origins="http://a.test, http://b.test")
        assert settings.cors_origins == ["http://a.test", "http://b.test"]

    def test_environment_flags(self):
        settings = Settings(_env_file=None, environment="production")
        assert settings.is_production
        assert not settings.is_development
        assert Settings(_env_file=None, environment="testing").is_testing

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
