"""Shared fixtures for event index tests."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest

from src.event_extraction.config import ExtractionConfig
from src.event_extraction.temporal import TemporalResolver
from src.events.config import EventsConfig
from src.events.normalizer import EventNormalizer
from src.events.schemas import EventRecord
from src.geocoding.schemas import GeoCoordinate

INDEXED_AT = datetime(2025, 12, 2, 9, 0, tzinfo=timezone.utc)
CHICAGO = ZoneInfo("America/Chicago")


@pytest.fixture
def mock_database() -> AsyncMock:
    """Mock Database instance matching the Database API."""
    db = AsyncMock()
    db.fetch = AsyncMock(return_value=[])
    db.fetchval = AsyncMock(return_value=None)
    db.fetchrow = AsyncMock(return_value=None)
    db.execute = AsyncMock(return_value="INSERT 0 1")
    return db


@pytest.fixture
def events_config() -> EventsConfig:
    return EventsConfig(default_state="TX", default_country="USA")


@pytest.fixture
def mock_geocoder() -> AsyncMock:
    """GeocodingService stand-in that resolves everything to Discovery Green."""
    geocoder = AsyncMock()
    geocoder.resolve = AsyncMock(return_value=GeoCoordinate(29.753, -95.3597))
    return geocoder


@pytest.fixture
def normalizer(events_config, mock_geocoder) -> EventNormalizer:
    """Normalizer with a fixed clock and the default extraction config."""
    return EventNormalizer(
        config=events_config,
        geocoder=mock_geocoder,
        temporal_resolver=TemporalResolver(ExtractionConfig()),
        clock=lambda: INDEXED_AT,
    )


@pytest.fixture
def sample_event() -> EventRecord:
    """A geocoded public event record."""
    return EventRecord(
        post_id=42,
        topic_id=7,
        category_id=5,
        title="Winter Mutual Aid Drive",
        starts_at=datetime(2025, 12, 9, 18, 0, tzinfo=CHICAGO),
        ends_at=datetime(2025, 12, 9, 20, 0, tzinfo=CHICAGO),
        timezone="America/Chicago",
        location_name="Discovery Green",
        address="1500 McKinney St",
        city="Houston",
        state="TX",
        zip="77010",
        coordinate=GeoCoordinate(29.753, -95.3597),
        external_url="https://example.org/rsvp",
        graphic_url="https://example.org/flyer.png",
        indexed_at=INDEXED_AT,
    )


@pytest.fixture
def sample_db_row(sample_event: EventRecord) -> dict:
    """A dict mimicking an asyncpg Record for an indexed event."""
    return {
        "id": 1,
        "post_id": sample_event.post_id,
        "topic_id": sample_event.topic_id,
        "category_id": sample_event.category_id,
        "visibility": "public",
        "title": sample_event.title,
        "starts_at": sample_event.starts_at,
        "ends_at": sample_event.ends_at,
        "timezone": sample_event.timezone,
        "location_name": sample_event.location_name,
        "address": sample_event.address,
        "city": sample_event.city,
        "state": sample_event.state,
        "zip": sample_event.zip,
        "lat": 29.753,
        "lng": -95.3597,
        "external_url": sample_event.external_url,
        "graphic_url": sample_event.graphic_url,
        "indexed_at": INDEXED_AT,
    }
