"""
Command-line interface for forum-events.

Provides commands to create the event index, reindex posts, inspect
the public feed, try the geocoder and check service health.

Usage:
    forum-events init-db             # Create the event index table
    forum-events reindex 123         # Reindex one post
    forum-events reindex-all         # Reindex every candidate post
    forum-events deindex 123         # Remove one post from the index
    forum-events feed --limit 20     # Print the public feed as JSON
    forum-events geocode "Austin TX" # Resolve a location
    forum-events health              # Check Postgres and Redis
"""

import asyncio
import json
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import click

from src.config.settings import get_settings
from src.observability.logging import setup_logging
from src.observability.metrics import get_metrics

if TYPE_CHECKING:
    from src.events.service import EventIndexer


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Forum Events - extract, geocode and index public event posts."""
    setup_logging(level="DEBUG" if debug else None)


def _redis_client():
    import redis.asyncio as redis

    return redis.from_url(
        str(get_settings().redis_url),
        encoding="utf-8",
        decode_responses=True,
    )


@asynccontextmanager
async def _open_indexer() -> AsyncIterator["EventIndexer"]:
    """Connect Postgres/Redis and yield a fully wired EventIndexer."""
    from src.event_extraction import ExtractionConfig, FieldExtractor, TemporalResolver
    from src.events.config import EventsConfig
    from src.events.normalizer import EventNormalizer
    from src.events.repository import EventIndexRepository
    from src.events.service import EventIndexer
    from src.events.sources import PostgresDocumentSource
    from src.geocoding import GeocodeCache, GeocodingConfig, GeocodingService
    from src.storage.database import Database

    events_config = EventsConfig()
    geocoding_config = GeocodingConfig()
    redis_client = _redis_client()

    try:
        async with Database() as db, GeocodingService(
            config=geocoding_config,
            cache=GeocodeCache(redis_client, geocoding_config),
        ) as geocoder:
            normalizer = EventNormalizer(
                config=events_config,
                geocoder=geocoder,
                field_extractor=FieldExtractor(),
                temporal_resolver=TemporalResolver(ExtractionConfig()),
            )
            yield EventIndexer(
                source=PostgresDocumentSource(db),
                normalizer=normalizer,
                repository=EventIndexRepository(db, default_limit=events_config.feed_limit),
                config=events_config,
            )
    finally:
        await redis_client.aclose()


@main.command("init-db")
def init_db() -> None:
    """Create the event index table and its indexes."""
    from src.events.repository import EventIndexRepository
    from src.storage.database import Database

    async def run():
        async with Database() as db:
            await EventIndexRepository(db).create_table()
        click.echo("Event index initialized successfully")

    asyncio.run(run())


@main.command()
@click.argument("post_id", type=int)
def reindex(post_id: int) -> None:
    """Reindex a single post."""
    from src.events.schemas import Rejection
    from src.events.service import IndexingError

    async def run() -> int:
        async with _open_indexer() as indexer:
            try:
                result = await indexer.reindex_post(post_id)
            except IndexingError as e:
                click.echo(click.style(f"Reindex failed: {e}", fg="red"), err=True)
                return 1

        if isinstance(result, Rejection):
            click.echo(f"Post {post_id} not indexed: {result.reason.value}")
        else:
            click.echo(json.dumps(result.to_feed_dict(full=True), indent=2))
        return 0

    sys.exit(asyncio.run(run()))


@main.command("reindex-all")
@click.option("--concurrency", default=None, type=int, help="Posts reindexed at once")
@click.option("--batch-size", default=None, type=int, help="Candidate ids fetched per page")
@click.option("--metrics/--no-metrics", default=False, help="Enable metrics server")
def reindex_all(concurrency: int | None, batch_size: int | None, metrics: bool) -> None:
    """Reindex every candidate post, continuing past failures."""

    async def run() -> int:
        if metrics:
            get_metrics().start_server()

        async with _open_indexer() as indexer:
            summary = await indexer.reindex_all(
                concurrency=concurrency, batch_size=batch_size
            )

        click.echo(f"Indexed:  {summary.indexed}")
        click.echo(f"Rejected: {summary.rejected}")
        click.echo(f"Failed:   {summary.failed}")
        if summary.failed_ids:
            shown = ", ".join(str(i) for i in summary.failed_ids[:20])
            more = "" if len(summary.failed_ids) <= 20 else f" (+{len(summary.failed_ids) - 20} more)"
            click.echo(click.style(f"Failed post ids: {shown}{more}", fg="yellow"))
        if summary.source_error:
            click.echo(
                click.style(f"Stopped early: {summary.source_error}", fg="red"), err=True
            )
            return 1
        return 0

    sys.exit(asyncio.run(run()))


@main.command()
@click.argument("post_id", type=int)
def deindex(post_id: int) -> None:
    """Remove a post from the event index."""

    async def run():
        async with _open_indexer() as indexer:
            removed = await indexer.deindex_post(post_id)
        click.echo(f"Post {post_id} {'removed' if removed else 'was not indexed'}")

    asyncio.run(run())


@main.command()
@click.option("--limit", default=None, type=int, help="Maximum events to return")
@click.option("--full", is_flag=True, help="Include indexed_at")
def feed(limit: int | None, full: bool) -> None:
    """Print public upcoming events as JSON, earliest first."""
    from src.events.config import EventsConfig
    from src.events.repository import EventIndexRepository
    from src.storage.database import Database

    async def run():
        config = EventsConfig()
        async with Database() as db:
            repo = EventIndexRepository(db, default_limit=config.feed_limit)
            events = await repo.query(limit=limit)
        click.echo(json.dumps([e.to_feed_dict(full=full) for e in events], indent=2))

    asyncio.run(run())


@main.command()
@click.argument("query")
@click.option("--no-cache", is_flag=True, help="Bypass the Redis cache")
def geocode(query: str, no_cache: bool) -> None:
    """Resolve a location description to coordinates.

    Example:
        forum-events geocode "4455 University Dr, Houston, TX"
    """
    from src.geocoding import GeocodeCache, GeocodingConfig, GeocodingService

    async def run():
        config = GeocodingConfig()
        redis_client = None if no_cache else _redis_client()
        cache = GeocodeCache(redis_client, config) if redis_client else None
        try:
            async with GeocodingService(config=config, cache=cache) as geocoder:
                coordinate = await geocoder.resolve(query)
        finally:
            if redis_client is not None:
                await redis_client.aclose()

        if coordinate is None:
            click.echo("Not found")
        else:
            click.echo(f"{coordinate.lat},{coordinate.lng}")

    asyncio.run(run())


@main.command()
def health() -> None:
    """Check health of Postgres and Redis."""
    import structlog
    logger = structlog.get_logger()

    async def check():
        results: dict[str, bool] = {}

        try:
            from src.events.repository import EVENT_INDEX_TABLE
            from src.storage.database import Database
            async with Database() as db:
                results["postgres"] = await db.health_check()
                results["event_index"] = await db.table_exists(EVENT_INDEX_TABLE)
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        try:
            from src.geocoding import GeocodeCache
            redis_client = _redis_client()
            results["redis"] = await GeocodeCache(redis_client).health_check()
            await redis_client.aclose()
        except Exception as e:
            results["redis"] = False
            logger.error("Redis health check failed", error=str(e))

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)

        all_healthy = True
        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))
            if not status:
                all_healthy = False

        click.echo("-" * 40)

        if all_healthy:
            click.echo(click.style("All services healthy!", fg="green"))
            sys.exit(0)
        else:
            click.echo(click.style("Some services unhealthy!", fg="red"))
            sys.exit(1)

    asyncio.run(check())


if __name__ == "__main__":
    main()
