"""Tests for the Redis geocode cache."""

import json
from unittest.mock import AsyncMock

import pytest

from src.geocoding.cache import GeocodeCache, normalize_query
from src.geocoding.config import GeocodingConfig
from src.geocoding.schemas import GeoCoordinate


class TestKeys:
    """Tests for cache keying."""

    def test_normalize_query(self):
        assert normalize_query("  Austin,   TX\tUSA ") == "austin, tx usa"

    def test_equivalent_queries_share_a_key(self, mock_redis):
        cache = GeocodeCache(mock_redis)
        assert cache.make_key("Austin, TX") == cache.make_key("  austin,  tx ")

    def test_key_format(self, mock_redis):
        key = GeocodeCache(mock_redis).make_key("Austin, TX")
        assert key.startswith("geocode:")
        assert len(key) == len("geocode:") + 32


class TestGet:
    """Tests for cache reads."""

    @pytest.mark.asyncio
    async def test_miss(self, mock_redis):
        cache = GeocodeCache(mock_redis)
        assert await cache.get("Austin, TX") is None

    @pytest.mark.asyncio
    async def test_hit(self, mock_redis):
        mock_redis.get.return_value = json.dumps(
            {"query": "Austin, TX", "lat": 30.2672, "lng": -97.7431}
        )
        cache = GeocodeCache(mock_redis)

        entry = await cache.get("Austin, TX")

        assert entry is not None
        assert entry.coordinate == GeoCoordinate(30.2672, -97.7431)

    @pytest.mark.asyncio
    async def test_cached_miss(self, mock_redis):
        mock_redis.get.return_value = json.dumps({"query": "nowhere", "lat": None, "lng": None})
        cache = GeocodeCache(mock_redis)

        entry = await cache.get("nowhere")

        assert entry is not None
        assert entry.coordinate is None

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_a_miss(self, mock_redis):
        mock_redis.get.return_value = "{not json"
        cache = GeocodeCache(mock_redis)

        assert await cache.get("Austin, TX") is None

    @pytest.mark.asyncio
    async def test_redis_error_is_a_miss(self, mock_redis):
        mock_redis.get.side_effect = ConnectionError("redis down")
        cache = GeocodeCache(mock_redis)

        assert await cache.get("Austin, TX") is None

    @pytest.mark.asyncio
    async def test_disabled(self, mock_redis):
        cache = GeocodeCache(mock_redis, GeocodingConfig(cache_enabled=False))

        assert await cache.get("Austin, TX") is None
        mock_redis.get.assert_not_called()


class TestSet:
    """Tests for cache writes."""

    @pytest.mark.asyncio
    async def test_stores_hit_with_seven_day_ttl(self, mock_redis):
        cache = GeocodeCache(mock_redis)

        await cache.set("Austin, TX", GeoCoordinate(30.2672, -97.7431))

        key, ttl, payload = mock_redis.setex.call_args[0]
        assert key == cache.make_key("Austin, TX")
        assert ttl == 7 * 86400
        assert json.loads(payload) == {"query": "Austin, TX", "lat": 30.2672, "lng": -97.7431}

    @pytest.mark.asyncio
    async def test_stores_miss(self, mock_redis):
        cache = GeocodeCache(mock_redis)

        await cache.set("nowhere", None)

        payload = json.loads(mock_redis.setex.call_args[0][2])
        assert payload["lat"] is None
        assert payload["lng"] is None

    @pytest.mark.asyncio
    async def test_redis_error_is_swallowed(self, mock_redis):
        mock_redis.setex.side_effect = ConnectionError("redis down")
        cache = GeocodeCache(mock_redis)

        await cache.set("Austin, TX", GeoCoordinate(30.2672, -97.7431))

    @pytest.mark.asyncio
    async def test_no_client(self):
        cache = GeocodeCache(None)

        assert not cache.enabled
        await cache.set("Austin, TX", None)
        assert await cache.get("Austin, TX") is None


class TestHealthCheck:
    """Tests for cache health check."""

    @pytest.mark.asyncio
    async def test_healthy(self, mock_redis):
        assert await GeocodeCache(mock_redis).health_check() is True

    @pytest.mark.asyncio
    async def test_unhealthy(self):
        client = AsyncMock()
        client.ping = AsyncMock(side_effect=ConnectionError("down"))
        assert await GeocodeCache(client).health_check() is False
