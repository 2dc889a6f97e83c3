"""Tests for application and component settings."""

from datetime import timedelta

import pytest

from src.config.settings import Settings, get_settings
from src.event_extraction.config import ExtractionConfig
from src.geocoding.config import GeocodingConfig


class TestSettings:
    """Tests for the central Settings object."""

    def test_defaults(self, test_settings: Settings):
        assert test_settings.environment == "development"
        assert not test_settings.is_production
        assert str(test_settings.redis_url).endswith("/1")

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DB_POOL_MAX_SIZE", "25")

        settings = Settings()

        assert settings.is_production
        assert settings.db_pool_max_size == 25

    def test_get_settings_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()


class TestComponentConfigs:
    """Tests for prefixed component configs."""

    def test_extraction_prefix(self, monkeypatch):
        monkeypatch.setenv("EXTRACTION_DEFAULT_TIMEZONE", "America/Denver")
        monkeypatch.setenv("EXTRACTION_DEFAULT_DURATION_MINUTES", "90")

        config = ExtractionConfig()

        assert config.default_zone.key == "America/Denver"
        assert config.default_duration == timedelta(minutes=90)

    def test_geocoding_defaults(self):
        config = GeocodingConfig(google_api_key=None)

        assert config.cache_ttl_seconds == 7 * 24 * 3600
        assert config.bounding_box.min_lat == pytest.approx(25.8371)
        assert config.bounding_box.max_lng == pytest.approx(-93.5080)

    def test_geocoding_key_is_secret(self, monkeypatch):
        monkeypatch.setenv("GEOCODING_GOOGLE_API_KEY", "abc123")

        config = GeocodingConfig()

        assert config.google_api_key.get_secret_value() == "abc123"
        assert "abc123" not in repr(config)
