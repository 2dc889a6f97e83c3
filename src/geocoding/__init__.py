"""
Geocoding: location description → coordinate.

Components:
- GeocodingConfig: Provider, timeout, cache and bounding-box settings
- GeoCoordinate / BoundingBox: Validated types and plausibility predicates
- GeocodingProvider: Strategy interface (Google, Nominatim)
- GeocodeCache: Redis TTL cache of hits and misses
- GeocodingService: Cache → providers → bounding box → cache
"""

from src.geocoding.cache import CachedGeocode, GeocodeCache
from src.geocoding.config import GeocodingConfig
from src.geocoding.providers import (
    GeocodingProvider,
    GoogleGeocodingProvider,
    NominatimGeocodingProvider,
)
from src.geocoding.schemas import (
    BoundingBox,
    GeoCoordinate,
    coerce_coordinate,
    is_valid_coordinate,
)
from src.geocoding.service import GeocodingService, build_providers

__all__ = [
    "BoundingBox",
    "CachedGeocode",
    "GeoCoordinate",
    "GeocodeCache",
    "GeocodingConfig",
    "GeocodingProvider",
    "GeocodingService",
    "GoogleGeocodingProvider",
    "NominatimGeocodingProvider",
    "build_providers",
    "coerce_coordinate",
    "is_valid_coordinate",
]
