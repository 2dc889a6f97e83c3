"""Event normalizer: one forum post → one EventRecord or a Rejection.

Eligibility checks run first and short-circuit. Eligible posts get their
fields and time window extracted, region defaults applied, and are only
geocoded when they describe a physical location.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from src.event_extraction.fields import FieldExtractor
from src.event_extraction.temporal import TemporalResolver
from src.events.config import EventsConfig
from src.events.schemas import (
    PUBLIC_VISIBILITY,
    EventRecord,
    Rejection,
    RejectionReason,
    SourceDocument,
)
from src.geocoding.schemas import GeoCoordinate
from src.geocoding.service import GeocodingService

logger = logging.getLogger(__name__)


def _present(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def has_physical_location(
    address: str | None, city: str | None, state: str | None
) -> bool:
    """
    True when a post names a real-world place: a street address, or both
    a city and a state. Venue names alone (often "Zoom", "Online") do not count.
    """
    return _present(address) or (_present(city) and _present(state))


def build_geocode_query(
    *,
    address: str | None,
    location_name: str | None,
    city: str | None,
    state: str | None,
    zip: str | None,
    country: str | None,
) -> str:
    """
    Join the location parts into one provider query.

    The address is preferred over the venue name; city, state, postal code
    and country follow. Absent parts are skipped.
    """
    base = address if _present(address) else location_name
    parts = [base, city, state, zip, country]
    return ", ".join(p.strip() for p in parts if _present(p))


class EventNormalizer:
    """
    Build canonical event records from source posts.

    Args:
        config: Region defaults and category allowlist.
        geocoder: Service used for posts with a physical location. Posts are
            stored without coordinates when None.
        field_extractor: Label extractor. Defaults to FieldExtractor().
        temporal_resolver: Date tag resolver. Defaults to TemporalResolver().
        clock: Source of ``indexed_at``. Defaults to the current UTC time.
    """

    def __init__(
        self,
        config: EventsConfig | None = None,
        geocoder: GeocodingService | None = None,
        field_extractor: FieldExtractor | None = None,
        temporal_resolver: TemporalResolver | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._config = config or EventsConfig()
        self._geocoder = geocoder
        self._fields = field_extractor or FieldExtractor()
        self._temporal = temporal_resolver or TemporalResolver()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._allowed_categories = self._config.allowed_category_ids

    def check_eligibility(self, doc: SourceDocument) -> RejectionReason | None:
        """Return the first reason the post cannot be an event, or None."""
        if doc.deleted:
            return RejectionReason.POST_DELETED
        if doc.topic_deleted:
            return RejectionReason.TOPIC_DELETED
        if not doc.topic_visible:
            return RejectionReason.TOPIC_HIDDEN
        if not _present(doc.raw):
            return RejectionReason.BLANK_BODY
        if self._allowed_categories and doc.category_id not in self._allowed_categories:
            return RejectionReason.CATEGORY_EXCLUDED
        return None

    async def normalize(self, doc: SourceDocument) -> EventRecord | Rejection:
        """
        Normalize a post.

        Args:
            doc: Source post with its topic flags.

        Returns:
            EventRecord for an eligible public event, otherwise Rejection.
        """
        reason = self.check_eligibility(doc)
        if reason is not None:
            return Rejection(post_id=doc.post_id, reason=reason)

        fields = self._fields.extract(doc.raw)
        if (fields.visibility or "").strip().lower() != PUBLIC_VISIBILITY:
            return Rejection(post_id=doc.post_id, reason=RejectionReason.NOT_PUBLIC)

        window = self._temporal.resolve(doc.raw, doc.created_at)
        if window is None:
            return Rejection(post_id=doc.post_id, reason=RejectionReason.NO_START_TIME)

        state = fields.state if _present(fields.state) else self._config.default_state

        coordinate = await self._geocode(
            doc.post_id,
            address=fields.address,
            location_name=fields.location_name,
            city=fields.city,
            state=state,
            zip=fields.zip,
        )

        return EventRecord(
            post_id=doc.post_id,
            topic_id=doc.topic_id,
            category_id=doc.category_id,
            title=fields.title or doc.topic_title,
            starts_at=window.start,
            ends_at=window.end,
            timezone=window.timezone,
            location_name=fields.location_name,
            address=fields.address,
            city=fields.city,
            state=state,
            zip=fields.zip,
            coordinate=coordinate,
            external_url=fields.external_url,
            graphic_url=fields.graphic_url,
            indexed_at=self._clock(),
        )

    async def _geocode(
        self,
        post_id: int,
        *,
        address: str | None,
        location_name: str | None,
        city: str | None,
        state: str | None,
        zip: str | None,
    ) -> GeoCoordinate | None:
        if self._geocoder is None:
            return None
        if not has_physical_location(address, city, state):
            logger.debug("Post %d has no physical location, skipping geocode", post_id)
            return None

        query = build_geocode_query(
            address=address,
            location_name=location_name,
            city=city,
            state=state,
            zip=zip,
            country=self._config.default_country,
        )
        if not query:
            return None

        coordinate = await self._geocoder.resolve(query)
        if coordinate is None:
            logger.info("No coordinate for post_id=%d query=%r", post_id, query)
        return coordinate
