"""Database repository for the event index table."""

import logging
from datetime import datetime

from src.events.schemas import PUBLIC_VISIBILITY, EventRecord
from src.geocoding.schemas import GeoCoordinate
from src.storage.database import Database

logger = logging.getLogger(__name__)

EVENT_INDEX_TABLE = "forum_event_index"

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS forum_event_index (
    id            BIGSERIAL PRIMARY KEY,
    post_id       BIGINT NOT NULL,
    topic_id      BIGINT NOT NULL,
    category_id   BIGINT,
    visibility    TEXT NOT NULL DEFAULT 'internal',
    title         TEXT,
    starts_at     TIMESTAMPTZ,
    ends_at       TIMESTAMPTZ,
    timezone      TEXT,
    location_name TEXT,
    address       TEXT,
    city          TEXT,
    state         TEXT,
    zip           TEXT,
    lat           DOUBLE PRECISION,
    lng           DOUBLE PRECISION,
    external_url  TEXT,
    graphic_url   TEXT,
    indexed_at    TIMESTAMPTZ NOT NULL,
    CONSTRAINT forum_event_index_coordinate_pair
        CHECK ((lat IS NULL) = (lng IS NULL))
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_forum_event_index_post_id
    ON forum_event_index(post_id);
CREATE INDEX IF NOT EXISTS idx_forum_event_index_visibility_starts_at
    ON forum_event_index(visibility, starts_at);
CREATE INDEX IF NOT EXISTS idx_forum_event_index_topic_id
    ON forum_event_index(topic_id);
CREATE INDEX IF NOT EXISTS idx_forum_event_index_category_id
    ON forum_event_index(category_id);
"""

# Every column is replaced so a reindex never leaves stale values behind.
_UPSERT_SQL = """
INSERT INTO forum_event_index (
    post_id, topic_id, category_id, visibility, title,
    starts_at, ends_at, timezone,
    location_name, address, city, state, zip, lat, lng,
    external_url, graphic_url, indexed_at
)
VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13, $14, $15, $16, $17, $18)
ON CONFLICT (post_id) DO UPDATE SET
    topic_id = EXCLUDED.topic_id,
    category_id = EXCLUDED.category_id,
    visibility = EXCLUDED.visibility,
    title = EXCLUDED.title,
    starts_at = EXCLUDED.starts_at,
    ends_at = EXCLUDED.ends_at,
    timezone = EXCLUDED.timezone,
    location_name = EXCLUDED.location_name,
    address = EXCLUDED.address,
    city = EXCLUDED.city,
    state = EXCLUDED.state,
    zip = EXCLUDED.zip,
    lat = EXCLUDED.lat,
    lng = EXCLUDED.lng,
    external_url = EXCLUDED.external_url,
    graphic_url = EXCLUDED.graphic_url,
    indexed_at = EXCLUDED.indexed_at
"""


def _record_to_event(record) -> EventRecord:
    """Convert an asyncpg Record to an EventRecord."""
    coordinate = None
    if record["lat"] is not None and record["lng"] is not None:
        coordinate = GeoCoordinate(lat=record["lat"], lng=record["lng"])

    return EventRecord(
        post_id=record["post_id"],
        topic_id=record["topic_id"],
        category_id=record["category_id"],
        visibility=record["visibility"],
        title=record["title"],
        starts_at=record["starts_at"],
        ends_at=record["ends_at"],
        timezone=record["timezone"],
        location_name=record["location_name"],
        address=record["address"],
        city=record["city"],
        state=record["state"],
        zip=record["zip"],
        coordinate=coordinate,
        external_url=record["external_url"],
        graphic_url=record["graphic_url"],
        indexed_at=record["indexed_at"],
    )


class EventIndexRepository:
    """
    Keyed, upsertable store of public event records.

    At most one row exists per post_id. Upserts are single statements,
    so readers see either the previous row or the new one.
    """

    def __init__(self, database: Database, default_limit: int = 200) -> None:
        self._db = database
        self._default_limit = default_limit

    async def create_table(self) -> None:
        """Create the event index table and indexes (idempotent)."""
        await self._db.execute(_CREATE_TABLE_SQL)
        logger.info("Event index table ensured")

    async def upsert(self, event: EventRecord) -> None:
        """Insert the record, or replace the existing row for its post_id."""
        await self._db.execute(
            _UPSERT_SQL,
            event.post_id,
            event.topic_id,
            event.category_id,
            event.visibility,
            event.title,
            event.starts_at,
            event.ends_at,
            event.timezone,
            event.location_name,
            event.address,
            event.city,
            event.state,
            event.zip,
            event.lat,
            event.lng,
            event.external_url,
            event.graphic_url,
            event.indexed_at,
        )

    async def delete(self, post_id: int) -> bool:
        """Delete the record for a post. Returns True if a row was removed."""
        result = await self._db.execute(
            "DELETE FROM forum_event_index WHERE post_id = $1", post_id
        )
        return result != "DELETE 0"

    async def get(self, post_id: int) -> EventRecord | None:
        """Fetch the record for a post."""
        row = await self._db.fetchrow(
            "SELECT * FROM forum_event_index WHERE post_id = $1", post_id
        )
        return _record_to_event(row) if row else None

    async def query(
        self,
        visibility: str = PUBLIC_VISIBILITY,
        after: datetime | None = None,
        limit: int | None = None,
    ) -> list[EventRecord]:
        """
        List events with a start time, earliest first.

        Args:
            visibility: Visibility to match (only "public" is ever stored).
            after: Only events starting at or after this instant.
            limit: Maximum rows; non-positive or None uses the default limit.
        """
        if limit is None or limit <= 0:
            limit = self._default_limit

        conditions = ["visibility = $1", "starts_at IS NOT NULL"]
        params: list = [visibility]
        idx = 2

        if after is not None:
            conditions.append(f"starts_at >= ${idx}")
            params.append(after)
            idx += 1

        sql = f"""
            SELECT * FROM forum_event_index
            WHERE {" AND ".join(conditions)}
            ORDER BY starts_at ASC, post_id ASC
            LIMIT ${idx}
        """
        params.append(limit)
        rows = await self._db.fetch(sql, *params)
        return [_record_to_event(r) for r in rows]

    async def count(self) -> int:
        """Count indexed events."""
        return await self._db.fetchval("SELECT COUNT(*) FROM forum_event_index") or 0
