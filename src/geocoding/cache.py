"""Redis-backed cache of geocode outcomes.

Both hits and misses are cached with the same TTL, so a query that
resolves to nothing is not sent upstream again until the entry expires.
"""

import hashlib
import json
import logging
from dataclasses import dataclass

import redis.asyncio as redis

from src.geocoding.config import GeocodingConfig
from src.geocoding.schemas import GeoCoordinate

logger = logging.getLogger(__name__)


def normalize_query(query: str) -> str:
    """Collapse whitespace and lowercase a query for cache keying."""
    return " ".join((query or "").split()).lower()


@dataclass(frozen=True)
class CachedGeocode:
    """A cache entry; ``coordinate`` is None for a cached miss."""

    query: str
    coordinate: GeoCoordinate | None


class GeocodeCache:
    """
    TTL cache of geocode results keyed by a hash of the normalized query.

    Redis failures are logged and reported as a miss (on read) or
    skipped (on write); they never reach the caller.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None,
        config: GeocodingConfig | None = None,
    ):
        self._redis = redis_client
        self._config = config or GeocodingConfig()

    @property
    def enabled(self) -> bool:
        return self._config.cache_enabled and self._redis is not None

    def make_key(self, query: str) -> str:
        """Create the Redis key for a query."""
        digest = hashlib.sha256(normalize_query(query).encode("utf-8")).hexdigest()[:32]
        return f"{self._config.cache_key_prefix}{digest}"

    async def get(self, query: str) -> CachedGeocode | None:
        """
        Look up a cached outcome.

        Returns:
            CachedGeocode (possibly a cached miss), or None when nothing
            usable is cached.
        """
        if not self.enabled:
            return None

        key = self.make_key(query)
        try:
            cached = await self._redis.get(key)
        except Exception as e:
            logger.warning("Geocode cache retrieval failed: %s", e)
            return None
        if not cached:
            return None

        try:
            payload = json.loads(cached)
            coordinate = None
            if payload.get("lat") is not None and payload.get("lng") is not None:
                coordinate = GeoCoordinate(lat=float(payload["lat"]), lng=float(payload["lng"]))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning("Discarding corrupt geocode cache entry %s: %s", key, e)
            return None

        logger.debug("Geocode cache hit: %s", key)
        return CachedGeocode(query=payload.get("query", query), coordinate=coordinate)

    async def set(self, query: str, coordinate: GeoCoordinate | None) -> None:
        """Store an outcome (hit or miss) with the configured TTL."""
        if not self.enabled:
            return

        key = self.make_key(query)
        payload = {
            "query": query,
            "lat": coordinate.lat if coordinate else None,
            "lng": coordinate.lng if coordinate else None,
        }
        try:
            await self._redis.setex(key, self._config.cache_ttl_seconds, json.dumps(payload))
            logger.debug("Cached geocode: %s", key)
        except Exception as e:
            logger.warning("Geocode cache storage failed: %s", e)

    async def health_check(self) -> bool:
        """Check if the Redis cache is available and responding."""
        if not self.enabled:
            return False
        try:
            await self._redis.ping()
            return True
        except Exception:
            return False
