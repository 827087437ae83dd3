"""Unit tests for interaction log repositories"""
import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from kb_assistant.models.schemas import InteractionLog
from kb_assistant.repositories.interaction_repository import (
    InMemoryInteractionLogRepository,
    SupabaseInteractionLogRepository,
)
from kb_assistant.utils.errors import NotFoundError, StoreError


def _log(**overrides) -> InteractionLog:
    data = {
        "customer_question": "What is your return policy?",
        "matched_entries": ["kb-return"],
        "ai_response": "Items can be returned within 30 days",
        "confidence_score": 0.65,
        "session_id": "session-1",
        "response_time_ms": 120,
        "sources_count": 1,
    }
    data.update(overrides)
    return InteractionLog(**data)


@pytest.fixture
def supabase_repo(mock_supabase):
    return SupabaseInteractionLogRepository(supabase_client=mock_supabase)


class TestSupabaseInsert:
    @pytest.mark.asyncio
    async def test_insert_serializes_payload(self, supabase_repo, mock_supabase):
        log = _log()
        mock_supabase.execute.return_value = MagicMock(data=[log.model_dump(mode="json")])

        result = await supabase_repo.insert(log)

        assert result.id == log.id
        mock_supabase.table.assert_called_with("ai_interactions")
        args, _ = mock_supabase.insert.call_args
        payload = args[0]
        assert payload["customer_question"] == "What is your return policy?"
        assert payload["matched_entries"] == ["kb-return"]
        assert isinstance(payload["created_at"], str)
        assert "customer_satisfaction" not in payload

    @pytest.mark.asyncio
    async def test_insert_error(self, supabase_repo, mock_supabase):
        mock_supabase.execute.side_effect = RuntimeError("relation does not exist")

        with pytest.raises(StoreError):
            await supabase_repo.insert(_log())


class TestSupabaseUpdateFeedback:
    @pytest.mark.asyncio
    async def test_update(self, supabase_repo, mock_supabase):
        mock_supabase.execute.return_value = MagicMock(data=[{"id": "abc"}])

        await supabase_repo.update_feedback("abc", 5, "Very helpful")

        mock_supabase.update.assert_called_once_with({
            "customer_satisfaction": 5,
            "feedback": "Very helpful",
        })
        mock_supabase.eq.assert_called_once_with("id", "abc")

    @pytest.mark.asyncio
    async def test_unknown_id(self, supabase_repo, mock_supabase):
        mock_supabase.execute.return_value = MagicMock(data=[])

        with pytest.raises(NotFoundError):
            await supabase_repo.update_feedback("nonexistent-id", 5)

    @pytest.mark.asyncio
    async def test_backend_error(self, supabase_repo, mock_supabase):
        mock_supabase.execute.side_effect = RuntimeError("invalid input syntax for type uuid")

        with pytest.raises(StoreError):
            await supabase_repo.update_feedback("nonexistent-id", 5)


class TestSupabaseListSince:
    @pytest.mark.asyncio
    async def test_range_query(self, supabase_repo, mock_supabase):
        since = datetime(2026, 9, 1, tzinfo=timezone.utc)
        mock_supabase.execute.return_value = MagicMock(data=[_log().model_dump(mode="json")])

        rows = await supabase_repo.list_since(since)

        assert len(rows) == 1
        assert rows[0].confidence_score == 0.65
        mock_supabase.select.assert_called_once_with(
            "confidence_score, customer_satisfaction, response_time_ms, created_at"
        )
        mock_supabase.gte.assert_called_once_with("created_at", since.isoformat())

    @pytest.mark.asyncio
    async def test_sparse_rows_are_read(self, supabase_repo, mock_supabase):
        mock_supabase.execute.return_value = MagicMock(data=[
            {"confidence_score": 0.8, "customer_satisfaction": 4, "response_time_ms": 100,
             "created_at": "2026-09-02T10:00:00+00:00"},
            {"confidence_score": None, "customer_satisfaction": None, "response_time_ms": None,
             "created_at": None},
        ])

        rows = await supabase_repo.list_since(datetime(2026, 9, 1, tzinfo=timezone.utc))

        assert [row.confidence_score for row in rows] == [0.8, 0.0]
        assert [row.response_time_ms for row in rows] == [100, 0]
        assert rows[1].customer_satisfaction is None


class TestInMemoryRepository:
    @pytest.mark.asyncio
    async def test_feedback_roundtrip(self):
        repo = InMemoryInteractionLogRepository()
        log = await repo.insert(_log())

        await repo.update_feedback(log.id, 4, "ok")

        assert repo.logs[log.id].customer_satisfaction == 4
        assert repo.logs[log.id].feedback == "ok"

    @pytest.mark.asyncio
    async def test_feedback_unknown_id(self):
        with pytest.raises(NotFoundError):
            await InMemoryInteractionLogRepository().update_feedback("missing", 3)

    @pytest.mark.asyncio
    async def test_list_since(self):
        repo = InMemoryInteractionLogRepository()
        now = datetime.now(timezone.utc)
        await repo.insert(_log(confidence_score=0.2, created_at=now - timedelta(days=40)))
        await repo.insert(_log(confidence_score=0.9, response_time_ms=80, created_at=now - timedelta(days=2)))

        rows = await repo.list_since(now - timedelta(days=30))

        assert len(rows) == 1
        assert rows[0].confidence_score == 0.9
        assert rows[0].response_time_ms == 80
