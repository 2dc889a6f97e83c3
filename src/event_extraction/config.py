"""Configuration for field and time extraction.

Uses Pydantic settings for environment-based configuration,
following the same pattern as other service configs in the project.
"""

from datetime import timedelta
from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExtractionConfig(BaseSettings):
    """
    Configuration for the field extractor and temporal resolver.

    All settings can be overridden via environment variables with EXTRACTION_ prefix.
    Example: EXTRACTION_DEFAULT_TIMEZONE=America/Denver

    Attributes:
        default_timezone: IANA zone used when a post names none.
        default_duration_minutes: Event length assumed when no end is given.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXTRACTION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_timezone: str = Field(
        default="America/Chicago",
        description="IANA timezone used when a date tag carries none.",
    )
    default_duration_minutes: int = Field(
        default=60,
        ge=1,
        le=24 * 60,
        description="Event duration applied when no end time is given.",
    )

    @property
    def default_zone(self) -> ZoneInfo:
        """Get the default timezone as a ZoneInfo."""
        return ZoneInfo(self.default_timezone)

    @property
    def default_duration(self) -> timedelta:
        """Get the default event duration."""
        return timedelta(minutes=self.default_duration_minutes)
