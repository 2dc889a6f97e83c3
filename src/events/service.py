"""Event indexer: keeps the event index in step with forum posts.

Wires the document source, normalizer and index repository together,
exposes the post/topic hooks the forum calls on create/edit/delete,
the bulk reindex job and the feed query.
"""

import asyncio
import time
import weakref

import structlog

from src.events.config import EventsConfig
from src.events.normalizer import EventNormalizer
from src.events.repository import EventIndexRepository
from src.events.schemas import (
    EventRecord,
    Rejection,
    RejectionReason,
    ReindexSummary,
)
from src.events.sources import DocumentSource
from src.observability.metrics import get_metrics

logger = structlog.get_logger(__name__)


class IndexingError(Exception):
    """Raised when a post could not be read or its index row could not be written."""

    def __init__(self, message: str, post_id: int):
        super().__init__(message)
        self.post_id = post_id


class EventIndexer:
    """
    Reindex and deindex posts in the event index.

    Reindexing a post either replaces its whole index row or, when the
    post is not an eligible public event, removes any row it had.
    Reindexes of the same post_id within one process are serialized.

    Usage:
        indexer = EventIndexer(source, normalizer, repository)
        await indexer.on_post_edited(123)
        summary = await indexer.reindex_all()
    """

    def __init__(
        self,
        source: DocumentSource,
        normalizer: EventNormalizer,
        repository: EventIndexRepository,
        config: EventsConfig | None = None,
    ) -> None:
        self._source = source
        self._normalizer = normalizer
        self._repo = repository
        self._config = config or EventsConfig()
        self._locks: weakref.WeakValueDictionary[int, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    @property
    def repository(self) -> EventIndexRepository:
        """Access the underlying repository for direct queries."""
        return self._repo

    def _lock_for(self, post_id: int) -> asyncio.Lock:
        lock = self._locks.get(post_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[post_id] = lock
        return lock

    # ── Single post ─────────────────────────────────────────────

    async def reindex_post(self, post_id: int) -> EventRecord | Rejection:
        """
        Rebuild the index row for one post.

        Returns:
            The stored EventRecord, or the Rejection that caused removal.

        Raises:
            IndexingError: The post could not be read or the row could not
                be written. The previous row is left as it was.
        """
        lock = self._lock_for(post_id)
        async with lock:
            started = time.perf_counter()
            metrics = get_metrics()

            try:
                doc = await self._source.get_document(post_id)
            except Exception as e:
                metrics.record_reindex("failed")
                raise IndexingError(f"Failed to load post {post_id}: {e}", post_id) from e

            if doc is None:
                result: EventRecord | Rejection = Rejection(
                    post_id=post_id, reason=RejectionReason.POST_MISSING
                )
            else:
                try:
                    result = await self._normalizer.normalize(doc)
                except Exception as e:
                    metrics.record_reindex("failed")
                    raise IndexingError(
                        f"Failed to normalize post {post_id}: {e}", post_id
                    ) from e

            try:
                if isinstance(result, Rejection):
                    removed = await self._repo.delete(post_id)
                    logger.debug(
                        "Post rejected",
                        post_id=post_id,
                        reason=result.reason.value,
                        removed_row=removed,
                    )
                else:
                    await self._repo.upsert(result)
            except Exception as e:
                metrics.record_reindex("failed")
                raise IndexingError(
                    f"Failed to write index row for post {post_id}: {e}", post_id
                ) from e

            latency = time.perf_counter() - started
            if isinstance(result, Rejection):
                metrics.record_reindex("rejected", latency=latency)
                metrics.record_rejection(result.reason.value)
            else:
                metrics.record_reindex("indexed", latency=latency)
                logger.info(
                    "Indexed event",
                    post_id=post_id,
                    starts_at=result.starts_at.isoformat(),
                    geocoded=result.coordinate is not None,
                )
            return result

    async def deindex_post(self, post_id: int) -> bool:
        """Remove a post's index row. Returns True if a row existed."""
        async with self._lock_for(post_id):
            removed = await self._repo.delete(post_id)
        get_metrics().record_reindex("deindexed")
        return removed

    # ── Forum hooks ─────────────────────────────────────────────

    async def on_post_created(self, post_id: int) -> EventRecord | Rejection:
        return await self.reindex_post(post_id)

    async def on_post_edited(self, post_id: int) -> EventRecord | Rejection:
        return await self.reindex_post(post_id)

    async def on_post_recovered(self, post_id: int) -> EventRecord | Rejection:
        return await self.reindex_post(post_id)

    async def on_post_destroyed(self, post_id: int) -> bool:
        return await self.deindex_post(post_id)

    async def on_topic_changed(self, topic_id: int) -> ReindexSummary:
        """Reindex every post of a topic after its visibility, category or deletion changed."""
        post_ids = await self._source.post_ids_for_topic(topic_id)
        summary = ReindexSummary()
        for post_id in post_ids:
            await self._reindex_counted(post_id, summary)
        return summary

    # ── Bulk ────────────────────────────────────────────────────

    async def _reindex_counted(self, post_id: int, summary: ReindexSummary) -> None:
        """Reindex one post, recording the outcome instead of raising."""
        try:
            result = await self.reindex_post(post_id)
        except Exception as e:
            summary.failed += 1
            summary.failed_ids.append(post_id)
            logger.warning(
                "Event reindex failed",
                post_id=post_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        if isinstance(result, Rejection):
            summary.rejected += 1
        else:
            summary.indexed += 1

    async def reindex_all(
        self,
        concurrency: int | None = None,
        batch_size: int | None = None,
    ) -> ReindexSummary:
        """
        Reindex every candidate post.

        Each post is independent: failures are logged and counted, and the
        run continues with the remaining posts.
        If listing candidates fails, posts already started are finished and
        the partial summary is returned with ``source_error`` set.

        Args:
            concurrency: Posts reindexed at once (default from config).
            batch_size: Candidate ids fetched per page (default from config).

        Returns:
            ReindexSummary with indexed/rejected/failed counts.
        """
        concurrency = concurrency or self._config.reindex_concurrency
        batch_size = batch_size or self._config.reindex_batch_size

        summary = ReindexSummary()
        semaphore = asyncio.Semaphore(concurrency)
        tasks: set[asyncio.Task] = set()
        started = time.perf_counter()

        async def run(post_id: int) -> None:
            try:
                await self._reindex_counted(post_id, summary)
            finally:
                semaphore.release()

        try:
            async for post_id in self._source.iter_candidate_ids(batch_size):
                await semaphore.acquire()
                task = asyncio.create_task(run(post_id))
                tasks.add(task)
                task.add_done_callback(tasks.discard)
        except Exception as e:
            summary.source_error = str(e) or type(e).__name__
            logger.error(
                "Candidate listing failed, finishing started posts",
                error=str(e),
                error_type=type(e).__name__,
                in_flight=len(tasks),
            )
        finally:
            if tasks:
                await asyncio.gather(*tasks)

        logger.info(
            "Reindex complete",
            indexed=summary.indexed,
            rejected=summary.rejected,
            failed=summary.failed,
            complete=summary.source_error is None,
            elapsed_seconds=round(time.perf_counter() - started, 1),
        )
        return summary

    # ── Feed ────────────────────────────────────────────────────

    async def feed(self, limit: int | None = None, full: bool = False) -> list[dict]:
        """
        Public events with a start time, earliest first, as flat dicts.

        Args:
            limit: Maximum events; non-positive or None uses the configured limit.
            full: Include ``indexed_at`` in each entry.
        """
        if limit is None or limit <= 0:
            limit = self._config.feed_limit
        events = await self._repo.query(limit=limit)
        return [event.to_feed_dict(full=full) for event in events]
