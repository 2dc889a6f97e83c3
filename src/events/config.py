"""Configuration for event normalization and indexing."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EventsConfig(BaseSettings):
    """
    Settings for the event normalizer, index and bulk reindex job.

    All settings can be overridden via environment variables with EVENTS_ prefix.
    Example: EVENTS_DEFAULT_STATE=OK
    """

    model_config = SettingsConfigDict(
        env_prefix="EVENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    default_state: str = Field(
        default="TX",
        description="State stored and geocoded when a post names none",
    )
    default_country: str = Field(
        default="USA",
        description="Country appended to geocode queries",
    )
    category_ids: str | None = Field(
        default=None,
        description="Comma-separated category allowlist (empty = every category)",
    )
    feed_limit: int = Field(
        default=200,
        ge=1,
        le=5000,
        description="Default number of events returned by the feed query",
    )
    reindex_concurrency: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Posts reindexed concurrently by the bulk job",
    )
    reindex_batch_size: int = Field(
        default=500,
        ge=1,
        le=10_000,
        description="Candidate post ids fetched per page by the bulk job",
    )

    @property
    def allowed_category_ids(self) -> frozenset[int]:
        """Parse the category allowlist, ignoring blanks and non-numeric entries."""
        if not self.category_ids:
            return frozenset()
        ids: set[int] = set()
        for part in self.category_ids.split(","):
            part = part.strip()
            if part.isdigit() and int(part) != 0:
                ids.add(int(part))
        return frozenset(ids)
