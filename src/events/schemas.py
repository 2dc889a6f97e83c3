"""Schema definitions for source posts and indexed events.

Provides SourceDocument (read-only view of a forum post), EventRecord
(one row of the event index), Rejection (why a post is not an event)
and ReindexSummary (outcome of a bulk run).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from src.geocoding.schemas import GeoCoordinate

PUBLIC_VISIBILITY = "public"


class RejectionReason(str, Enum):
    """Reasons a post produces no event record."""

    POST_MISSING = "post_missing"
    POST_DELETED = "post_deleted"
    TOPIC_DELETED = "topic_deleted"
    TOPIC_HIDDEN = "topic_hidden"
    BLANK_BODY = "blank_body"
    CATEGORY_EXCLUDED = "category_excluded"
    NOT_PUBLIC = "not_public"
    NO_START_TIME = "no_start_time"


@dataclass(frozen=True)
class SourceDocument:
    """
    A forum post together with the topic flags that decide eligibility.

    Attributes:
        post_id: Unique post identifier.
        topic_id: Parent topic identifier.
        raw: Post body (markdown source).
        created_at: Post creation time.
        deleted: Post is soft-deleted.
        topic_deleted: Parent topic is soft-deleted.
        topic_visible: Parent topic is listed (unlisted topics are not indexed).
        category_id: Category of the parent topic.
        topic_title: Title of the parent topic, used when the body has none.
    """

    post_id: int
    topic_id: int
    raw: str
    created_at: datetime | None
    deleted: bool = False
    topic_deleted: bool = False
    topic_visible: bool = True
    category_id: int | None = None
    topic_title: str = ""


@dataclass(frozen=True)
class Rejection:
    """A post that is not an eligible public event."""

    post_id: int
    reason: RejectionReason

    def __str__(self) -> str:
        return f"post {self.post_id} rejected: {self.reason.value}"


@dataclass
class EventRecord:
    """
    One denormalized row of the public event index.

    Attributes:
        post_id: Source post (unique key).
        topic_id: Parent topic.
        category_id: Category of the parent topic.
        title: Event title.
        starts_at: Start instant (timezone-aware).
        ends_at: End instant (timezone-aware, >= starts_at).
        timezone: IANA zone the event was announced in.
        location_name: Venue name.
        address: Street address.
        city: City.
        state: State, defaulted from configuration when absent.
        zip: Postal code.
        coordinate: Geocoded position, or None.
        external_url: RSVP / more-info link.
        graphic_url: Flyer link.
        visibility: Always "public" for stored records.
        indexed_at: When this record was last built.
    """

    post_id: int
    topic_id: int
    title: str
    starts_at: datetime
    ends_at: datetime
    timezone: str
    indexed_at: datetime
    category_id: int | None = None
    location_name: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    coordinate: GeoCoordinate | None = None
    external_url: str | None = None
    graphic_url: str | None = None
    visibility: str = PUBLIC_VISIBILITY

    @property
    def lat(self) -> float | None:
        return self.coordinate.lat if self.coordinate else None

    @property
    def lng(self) -> float | None:
        return self.coordinate.lng if self.coordinate else None

    def to_feed_dict(self, full: bool = False) -> dict[str, Any]:
        """
        Flatten for the public JSON feed.

        Args:
            full: Include ``indexed_at``.

        Returns:
            Dict with the coordinate split into nullable ``lat``/``lng``.
        """
        data: dict[str, Any] = {
            "id": f"discourse-post-{self.post_id}",
            "post_id": self.post_id,
            "topic_id": self.topic_id,
            "category_id": self.category_id,
            "title": self.title,
            "start": self.starts_at.isoformat() if self.starts_at else None,
            "end": self.ends_at.isoformat() if self.ends_at else None,
            "timezone": self.timezone,
            "location_name": self.location_name,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "lat": self.lat,
            "lng": self.lng,
            "external_url": self.external_url,
            "graphic_url": self.graphic_url,
        }
        if full:
            data["indexed_at"] = self.indexed_at.isoformat() if self.indexed_at else None
        return data


@dataclass
class ReindexSummary:
    """Outcome counts of a bulk reindex."""

    indexed: int = 0
    rejected: int = 0
    failed: int = 0
    failed_ids: list[int] = field(default_factory=list)
    # Set when listing candidates failed part way; counts cover only posts started before it
    source_error: str | None = None

    @property
    def total(self) -> int:
        return self.indexed + self.rejected + self.failed
