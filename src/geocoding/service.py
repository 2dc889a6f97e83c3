"""
Geocoding service: query string → validated coordinate.

Checks the cache, then asks each provider in priority order, then
applies the region-of-interest filter and caches the final outcome.
resolve() never raises; every failure mode is "no coordinate".
"""

import logging
from typing import Any

import httpx

from src.geocoding.cache import GeocodeCache
from src.geocoding.config import GeocodingConfig
from src.geocoding.providers import (
    GeocodingProvider,
    GoogleGeocodingProvider,
    NominatimGeocodingProvider,
)
from src.geocoding.schemas import GeoCoordinate
from src.observability.metrics import get_metrics

logger = logging.getLogger(__name__)


def build_providers(config: GeocodingConfig) -> list[GeocodingProvider]:
    """Build the default provider chain: Google when keyed, then Nominatim."""
    providers: list[GeocodingProvider] = []
    if config.google_api_key is not None and config.google_api_key.get_secret_value():
        providers.append(
            GoogleGeocodingProvider(config.google_api_key.get_secret_value(), url=config.google_url)
        )
    if config.nominatim_enabled:
        providers.append(NominatimGeocodingProvider(url=config.nominatim_url))
    return providers


class GeocodingService:
    """
    Resolve location descriptions to coordinates inside the region of interest.

    Usage:
        async with GeocodingService(cache=GeocodeCache(redis_client)) as geocoder:
            coordinate = await geocoder.resolve("4455 University Dr, Houston, TX")

    Args:
        config: Geocoding configuration. Uses defaults if None.
        providers: Ordered provider chain. Built from config if None.
        cache: Result cache. Caching is skipped if None.
        http_client: Shared httpx client. One is created (and owned) if None.
    """

    def __init__(
        self,
        config: GeocodingConfig | None = None,
        providers: list[GeocodingProvider] | None = None,
        cache: GeocodeCache | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._config = config or GeocodingConfig()
        self._providers = providers if providers is not None else build_providers(self._config)
        self._cache = cache
        self._bbox = self._config.bounding_box
        self._client = http_client
        self._owns_client = http_client is None

    async def __aenter__(self) -> "GeocodingService":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._config.request_timeout,
                headers={"User-Agent": self._config.user_agent},
            )
            self._owns_client = True
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this service created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def providers(self) -> list[GeocodingProvider]:
        return list(self._providers)

    async def resolve(self, query: str) -> GeoCoordinate | None:
        """
        Resolve a location description.

        Args:
            query: Free-text location, e.g. "100 Main St, Austin, TX, USA".

        Returns:
            Coordinate inside the configured bounding box, or None.
        """
        query = " ".join((query or "").split())
        if not query:
            return None

        metrics = get_metrics()

        if self._cache is not None:
            cached = await self._cache.get(query)
            metrics.record_geocode_cache(hit=cached is not None)
            if cached is not None:
                return cached.coordinate

        coordinate = await self._query_providers(query)

        if self._cache is not None:
            await self._cache.set(query, coordinate)
        return coordinate

    async def _query_providers(self, query: str) -> GeoCoordinate | None:
        client = self._ensure_client()
        metrics = get_metrics()

        for provider in self._providers:
            coordinate = await provider.geocode(client, query)
            if coordinate is None:
                metrics.record_geocode(provider.name, "not_found")
                continue

            if not self._bbox.contains(coordinate):
                # The first answering provider decides; no fallback after a rejection
                logger.info(
                    "Dropping out-of-region coordinate from %s for %r: %s,%s",
                    provider.name, query, coordinate.lat, coordinate.lng,
                )
                metrics.record_geocode(provider.name, "out_of_bounds")
                return None

            metrics.record_geocode(provider.name, "found")
            return coordinate

        logger.debug("No provider resolved %r", query)
        return None
