"""Tests for PostgresDocumentSource."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from src.events.sources import PostgresDocumentSource


def _row(**overrides) -> dict:
    row = {
        "post_id": 42,
        "topic_id": 7,
        "raw": "Potluck\nVisibility: Public",
        "created_at": datetime(2025, 12, 1, tzinfo=timezone.utc),
        "deleted": False,
        "topic_deleted": False,
        "topic_visible": True,
        "category_id": 5,
        "topic_title": "Potluck",
    }
    row.update(overrides)
    return row


class TestGetDocument:
    """Tests for single-post loading."""

    @pytest.mark.asyncio
    async def test_found(self, mock_database: AsyncMock) -> None:
        mock_database.fetchrow.return_value = _row()
        source = PostgresDocumentSource(mock_database)

        doc = await source.get_document(42)

        assert doc.post_id == 42
        assert doc.topic_visible is True
        assert doc.category_id == 5
        sql, post_id = mock_database.fetchrow.call_args[0]
        assert "LEFT JOIN topics" in sql
        assert post_id == 42

    @pytest.mark.asyncio
    async def test_null_raw_becomes_empty(self, mock_database: AsyncMock) -> None:
        mock_database.fetchrow.return_value = _row(raw=None)
        doc = await PostgresDocumentSource(mock_database).get_document(42)
        assert doc.raw == ""

    @pytest.mark.asyncio
    async def test_missing(self, mock_database: AsyncMock) -> None:
        assert await PostgresDocumentSource(mock_database).get_document(42) is None


class TestIterCandidateIds:
    """Tests for keyset pagination."""

    @pytest.mark.asyncio
    async def test_pages_until_short_page(self, mock_database: AsyncMock) -> None:
        mock_database.fetch.side_effect = [
            [{"id": 1}, {"id": 2}],
            [{"id": 5}],
        ]
        source = PostgresDocumentSource(mock_database)

        ids = [post_id async for post_id in source.iter_candidate_ids(batch_size=2)]

        assert ids == [1, 2, 5]
        calls = mock_database.fetch.call_args_list
        assert calls[0][0][1:] == (0, 2)
        assert calls[1][0][1:] == (2, 2)

    @pytest.mark.asyncio
    async def test_stops_on_empty_page(self, mock_database: AsyncMock) -> None:
        mock_database.fetch.side_effect = [[{"id": 1}, {"id": 2}], []]
        source = PostgresDocumentSource(mock_database)

        ids = [post_id async for post_id in source.iter_candidate_ids(batch_size=2)]

        assert ids == [1, 2]
        assert mock_database.fetch.call_count == 2


class TestPostIdsForTopic:
    """Tests for topic fan-out."""

    @pytest.mark.asyncio
    async def test_returns_ids(self, mock_database: AsyncMock) -> None:
        mock_database.fetch.return_value = [{"id": 3}, {"id": 4}]

        ids = await PostgresDocumentSource(mock_database).post_ids_for_topic(7)

        assert ids == [3, 4]
        assert mock_database.fetch.call_args[0][1] == 7
