"""Read access to the host forum's posts and topics."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from src.events.schemas import SourceDocument
from src.storage.database import Database

logger = logging.getLogger(__name__)


class DocumentSource(ABC):
    """Read-only view of forum posts used by the indexer."""

    @abstractmethod
    async def get_document(self, post_id: int) -> SourceDocument | None:
        """Load a post with its topic flags, or None if the post does not exist."""

    @abstractmethod
    def iter_candidate_ids(self, batch_size: int = 500) -> AsyncIterator[int]:
        """Yield ids of non-deleted posts in ascending order."""

    @abstractmethod
    async def post_ids_for_topic(self, topic_id: int) -> list[int]:
        """Return ids of every post in a topic, deleted ones included."""


_GET_DOCUMENT_SQL = """
SELECT
    p.id AS post_id,
    p.topic_id,
    p.raw,
    p.created_at,
    p.deleted_at IS NOT NULL AS deleted,
    (t.id IS NULL OR t.deleted_at IS NOT NULL) AS topic_deleted,
    COALESCE(t.visible, FALSE) AS topic_visible,
    t.category_id,
    COALESCE(t.title, '') AS topic_title
FROM posts p
LEFT JOIN topics t ON t.id = p.topic_id
WHERE p.id = $1
"""

_CANDIDATE_IDS_SQL = """
SELECT id FROM posts
WHERE deleted_at IS NULL AND id > $1
ORDER BY id
LIMIT $2
"""


def _record_to_document(record) -> SourceDocument:
    """Convert an asyncpg Record to a SourceDocument."""
    return SourceDocument(
        post_id=record["post_id"],
        topic_id=record["topic_id"],
        raw=record["raw"] or "",
        created_at=record["created_at"],
        deleted=record["deleted"],
        topic_deleted=record["topic_deleted"],
        topic_visible=record["topic_visible"],
        category_id=record["category_id"],
        topic_title=record["topic_title"],
    )


class PostgresDocumentSource(DocumentSource):
    """DocumentSource over the Discourse ``posts`` and ``topics`` tables."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def get_document(self, post_id: int) -> SourceDocument | None:
        row = await self._db.fetchrow(_GET_DOCUMENT_SQL, post_id)
        return _record_to_document(row) if row else None

    async def iter_candidate_ids(self, batch_size: int = 500) -> AsyncIterator[int]:
        last_id = 0
        while True:
            rows = await self._db.fetch(_CANDIDATE_IDS_SQL, last_id, batch_size)
            if not rows:
                return
            for row in rows:
                yield row["id"]
            last_id = rows[-1]["id"]
            if len(rows) < batch_size:
                return

    async def post_ids_for_topic(self, topic_id: int) -> list[int]:
        rows = await self._db.fetch(
            "SELECT id FROM posts WHERE topic_id = $1 ORDER BY id", topic_id
        )
        return [r["id"] for r in rows]
