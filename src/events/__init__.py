"""
Public event index for forum posts.

Components:
- EventsConfig: Region defaults, category allowlist, feed and bulk settings
- SourceDocument / EventRecord / Rejection: Pipeline data types
- EventNormalizer: Post → EventRecord or Rejection
- EventIndexRepository: Keyed upsert/delete/query over PostgreSQL
- DocumentSource: Read access to forum posts
- EventIndexer: Reindex/deindex hooks, bulk reindex and feed
"""

from src.events.config import EventsConfig
from src.events.normalizer import (
    EventNormalizer,
    build_geocode_query,
    has_physical_location,
)
from src.events.repository import EventIndexRepository
from src.events.schemas import (
    PUBLIC_VISIBILITY,
    EventRecord,
    Rejection,
    RejectionReason,
    ReindexSummary,
    SourceDocument,
)
from src.events.service import EventIndexer, IndexingError
from src.events.sources import DocumentSource, PostgresDocumentSource

__all__ = [
    "PUBLIC_VISIBILITY",
    "DocumentSource",
    "EventIndexRepository",
    "EventIndexer",
    "EventNormalizer",
    "EventRecord",
    "EventsConfig",
    "IndexingError",
    "PostgresDocumentSource",
    "Rejection",
    "RejectionReason",
    "ReindexSummary",
    "SourceDocument",
    "build_geocode_query",
    "has_physical_location",
]
