"""Shared fixtures for geocoding tests."""

from unittest.mock import AsyncMock

import pytest

from src.geocoding.config import GeocodingConfig


@pytest.fixture
def geocoding_config() -> GeocodingConfig:
    """Config with both providers enabled."""
    return GeocodingConfig(google_api_key="test-key", nominatim_enabled=True)


@pytest.fixture
def keyless_config() -> GeocodingConfig:
    """Config without a Google key (Nominatim only)."""
    return GeocodingConfig(google_api_key=None, nominatim_enabled=True)


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Mock redis.asyncio client with an empty store."""
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock(return_value=True)
    client.ping = AsyncMock(return_value=True)
    return client
