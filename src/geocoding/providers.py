"""
Upstream geocoding providers.

Each provider turns a query string into at most one coordinate. Any
failure (transport error, timeout, non-2xx status, malformed payload,
empty result set) is reported as None so the service can move on to
the next provider.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from src.geocoding.schemas import GeoCoordinate

logger = logging.getLogger(__name__)


class GeocodingProvider(ABC):
    """Strategy interface: resolve a query to a coordinate or None."""

    name: str = "provider"

    @abstractmethod
    async def _lookup(self, client: httpx.AsyncClient, query: str) -> tuple[Any, Any] | None:
        """
        Perform the provider request.

        Returns:
            Raw (lat, lng) values from the best match, or None for no match.

        Raises:
            httpx.HTTPError or a lookup/parse error (ValueError, KeyError, ...) on
            transport or payload problems; geocode() absorbs them.
        """

    async def geocode(self, client: httpx.AsyncClient, query: str) -> GeoCoordinate | None:
        """Resolve a query, returning None on any failure."""
        try:
            raw = await self._lookup(client, query)
        except httpx.TimeoutException:
            logger.warning("%s geocode timed out for %r", self.name, query)
            return None
        except httpx.HTTPError as e:
            logger.warning("%s geocode failed for %r: %s", self.name, query, e)
            return None
        except (ValueError, KeyError, TypeError, IndexError, AttributeError) as e:
            logger.warning("%s returned a malformed payload for %r: %s", self.name, query, e)
            return None

        if raw is None:
            return None
        return GeoCoordinate.from_raw(*raw)


class GoogleGeocodingProvider(GeocodingProvider):
    """Google Geocoding API (keyed, primary)."""

    name = "google"

    def __init__(self, api_key: str, url: str = "https://maps.googleapis.com/maps/api/geocode/json"):
        self._api_key = api_key
        self._url = url

    async def _lookup(self, client: httpx.AsyncClient, query: str) -> tuple[Any, Any] | None:
        response = await client.get(self._url, params={"address": query, "key": self._api_key})
        if not response.is_success:
            logger.info("google geocode HTTP %d for %r", response.status_code, query)
            return None

        data = response.json()
        status = data.get("status")
        if status != "OK":
            logger.debug("google geocode status %s for %r", status, query)
            return None

        results = data.get("results") or []
        if not results:
            return None
        location = results[0]["geometry"]["location"]
        return location.get("lat"), location.get("lng")


class NominatimGeocodingProvider(GeocodingProvider):
    """OpenStreetMap Nominatim search (free, fallback)."""

    name = "nominatim"

    def __init__(self, url: str = "https://nominatim.openstreetmap.org/search"):
        self._url = url

    async def _lookup(self, client: httpx.AsyncClient, query: str) -> tuple[Any, Any] | None:
        response = await client.get(
            self._url, params={"q": query, "format": "json", "limit": 1}
        )
        if not response.is_success:
            logger.info("nominatim geocode HTTP %d for %r", response.status_code, query)
            return None

        data = response.json()
        if not data:
            return None
        first = data[0]
        return first.get("lat"), first.get("lon")
