"""
Geocoding service configuration.

Provides Pydantic settings for the upstream providers, request timeout,
Redis result caching and the region-of-interest bounding box.
"""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.geocoding.schemas import BoundingBox


class GeocodingConfig(BaseSettings):
    """
    Configuration for location → coordinate resolution.

    Settings can be overridden via environment variables prefixed with GEOCODING_.
    The bounding box defaults to the state of Texas.
    """

    model_config = SettingsConfigDict(
        env_prefix="GEOCODING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Providers (tried in this order)
    google_api_key: SecretStr | None = Field(
        default=None,
        description="Google Geocoding API key; Google is skipped when unset",
    )
    google_url: str = Field(
        default="https://maps.googleapis.com/maps/api/geocode/json",
        description="Google Geocoding API endpoint",
    )
    nominatim_enabled: bool = Field(
        default=True,
        description="Use OpenStreetMap Nominatim as the fallback provider",
    )
    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org/search",
        description="Nominatim search endpoint",
    )
    request_timeout: float = Field(
        default=8.0,
        gt=0.0,
        le=30.0,
        description="Per-request timeout in seconds",
    )
    user_agent: str = Field(
        default="forum-events/0.1.0 (geocoding)",
        description="User-Agent sent to providers (required by Nominatim policy)",
    )

    # Caching configuration
    cache_enabled: bool = Field(
        default=True,
        description="Enable Redis caching for geocode results",
    )
    cache_ttl_days: int = Field(
        default=7,
        ge=1,
        description="Cache TTL in days, applies to misses as well as hits",
    )
    cache_key_prefix: str = Field(
        default="geocode:",
        description="Redis key prefix for cached geocode results",
    )

    # Region of interest
    bbox_min_lat: float = Field(default=25.8371, ge=-90.0, le=90.0)
    bbox_max_lat: float = Field(default=36.5007, ge=-90.0, le=90.0)
    bbox_min_lng: float = Field(default=-106.6456, ge=-180.0, le=180.0)
    bbox_max_lng: float = Field(default=-93.5080, ge=-180.0, le=180.0)

    @property
    def cache_ttl_seconds(self) -> int:
        """Get cache TTL in seconds."""
        return self.cache_ttl_days * 86400

    @property
    def bounding_box(self) -> BoundingBox:
        """Get the configured region of interest."""
        return BoundingBox(
            min_lat=self.bbox_min_lat,
            max_lat=self.bbox_max_lat,
            min_lng=self.bbox_min_lng,
            max_lng=self.bbox_max_lng,
        )
