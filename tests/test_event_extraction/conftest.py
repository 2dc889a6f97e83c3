"""Shared fixtures for event extraction tests."""

import pytest

from src.event_extraction.config import ExtractionConfig
from src.event_extraction.fields import FieldExtractor
from src.event_extraction.temporal import TemporalResolver


@pytest.fixture
def extraction_config() -> ExtractionConfig:
    """Default extraction config (America/Chicago, 60 minutes)."""
    return ExtractionConfig(default_timezone="America/Chicago", default_duration_minutes=60)


@pytest.fixture
def field_extractor() -> FieldExtractor:
    return FieldExtractor()


@pytest.fixture
def resolver(extraction_config: ExtractionConfig) -> TemporalResolver:
    """TemporalResolver with default config."""
    return TemporalResolver(extraction_config)
