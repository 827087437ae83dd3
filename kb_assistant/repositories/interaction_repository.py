"""
Interaction Log Repository

Persists one record per answered customer question in the
`ai_interactions` table, attaches customer feedback to it later, and
reads recent records back for analytics.
"""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Any

from kb_assistant.config import get_settings
from kb_assistant.models.schemas import InteractionLog, InteractionStatsRow
from kb_assistant.utils.errors import NotFoundError, StoreError
from kb_assistant.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()

STATS_COLUMNS = "confidence_score, customer_satisfaction, response_time_ms, created_at"


class InteractionLogRepository(ABC):
    """Write-mostly store of assistant interactions"""

    @abstractmethod
    async def insert(self, log: InteractionLog) -> InteractionLog:
        """Append a log record."""

    @abstractmethod
    async def update_feedback(
        self,
        interaction_id: str,
        satisfaction: float,
        feedback: Optional[str] = None
    ) -> None:
        """
        Attach customer feedback to an existing record

        Raises:
            NotFoundError: If no record has this id
            StoreError: If the backend update fails
        """

    @abstractmethod
    async def list_since(self, since: datetime) -> List[InteractionStatsRow]:
        """Stats columns of records created at or after `since`."""


class SupabaseInteractionLogRepository(InteractionLogRepository):
    """Interaction logs stored in Supabase"""

    def __init__(self, supabase_client=None, table_name: Optional[str] = None) -> None:
        if supabase_client is None:
            from supabase import create_client  # Lazy import for tests

            self.client = create_client(
                settings.supabase_url,
                settings.supabase_api_key
            )
        else:
            self.client = supabase_client

        self.table_name = table_name or settings.interactions_table
        logger.info("InteractionLogRepository initialized for table: %s", self.table_name)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _serialize(log: InteractionLog) -> Dict[str, Any]:
        """Prepare payload for Supabase (ISO timestamps, strip None)."""
        return log.model_dump(mode="json", exclude_none=True)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    def _insert(self, log: InteractionLog) -> InteractionLog:
        try:
            response = self.client.table(self.table_name) \
                .insert(self._serialize(log)) \
                .execute()

            if not response.data:
                return log
            return InteractionLog(**response.data[0])

        except Exception as exc:
            logger.error("Failed to log interaction: %s", exc)
            raise StoreError(f"Failed to log interaction: {exc}") from exc

    async def insert(self, log: InteractionLog) -> InteractionLog:
        return await asyncio.to_thread(self._insert, log)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------
    def _update_feedback(
        self,
        interaction_id: str,
        satisfaction: float,
        feedback: Optional[str]
    ) -> None:
        try:
            response = self.client.table(self.table_name) \
                .update({
                    "customer_satisfaction": satisfaction,
                    "feedback": feedback,
                }) \
                .eq("id", interaction_id) \
                .execute()

        except Exception as exc:
            logger.error("Failed to record feedback for %s: %s", interaction_id, exc)
            raise StoreError(f"Failed to record feedback: {exc}") from exc

        if not response.data:
            raise NotFoundError(f"Interaction {interaction_id} not found")

    async def update_feedback(
        self,
        interaction_id: str,
        satisfaction: float,
        feedback: Optional[str] = None
    ) -> None:
        await asyncio.to_thread(self._update_feedback, interaction_id, satisfaction, feedback)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def _list_since(self, since: datetime) -> List[InteractionStatsRow]:
        try:
            response = self.client.table(self.table_name) \
                .select(STATS_COLUMNS) \
                .gte("created_at", since.isoformat()) \
                .execute()

            return [InteractionStatsRow(**row) for row in response.data or []]

        except Exception as exc:
            logger.error("Failed to fetch interactions since %s: %s", since, exc)
            raise StoreError(f"Failed to fetch interactions: {exc}") from exc

    async def list_since(self, since: datetime) -> List[InteractionStatsRow]:
        return await asyncio.to_thread(self._list_since, since)


class InMemoryInteractionLogRepository(InteractionLogRepository):
    """Dict-backed interaction store"""

    def __init__(self) -> None:
        self.logs: Dict[str, InteractionLog] = {}

    async def insert(self, log: InteractionLog) -> InteractionLog:
        self.logs[log.id] = log
        return log

    async def update_feedback(
        self,
        interaction_id: str,
        satisfaction: float,
        feedback: Optional[str] = None
    ) -> None:
        if interaction_id not in self.logs:
            raise NotFoundError(f"Interaction {interaction_id} not found")
        self.logs[interaction_id] = self.logs[interaction_id].model_copy(
            update={"customer_satisfaction": satisfaction, "feedback": feedback}
        )

    async def list_since(self, since: datetime) -> List[InteractionStatsRow]:
        return [
            InteractionStatsRow(**log.model_dump(include=set(InteractionStatsRow.model_fields)))
            for log in self.logs.values()
            if log.created_at >= since
        ]
