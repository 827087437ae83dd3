"""
Knowledge Repository - read access to the knowledge_base table

The assistant only needs a handful of primitives: substring OR-match over
title/content, tag membership, the approval filter, and ordering by stored
confidence with a row limit. Both implementations below provide exactly
that, so the Supabase backend can be swapped for the in-memory one in tests.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from kb_assistant.config import get_settings
from kb_assistant.models.schemas import KnowledgeEntry, KnowledgeQuery
from kb_assistant.utils.errors import StoreError
from kb_assistant.utils.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()

KNOWLEDGE_COLUMNS = "id, title, content, category, confidence_score, tags, is_approved"


class KnowledgeRepository(ABC):
    """Read-only knowledge store used by the assistant"""

    @abstractmethod
    async def search(self, query: KnowledgeQuery) -> List[KnowledgeEntry]:
        """
        Run one search primitive

        Raises:
            StoreError: If the backend query fails
        """

    @abstractmethod
    async def browse(
        self,
        text: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        limit: int = 10
    ) -> List[KnowledgeEntry]:
        """
        Filtered lookup ordered by most recently updated

        Args:
            text: Substring to match in title or content
            category: Exact category
            tags: Entry must share at least one tag
            limit: Maximum rows

        Raises:
            StoreError: If the backend query fails
        """


class SupabaseKnowledgeRepository(KnowledgeRepository):
    """Knowledge store backed by a Supabase (PostgREST) table"""

    def __init__(self, supabase_client=None, table_name: Optional[str] = None):
        """
        Initialize repository with Supabase client

        Args:
            supabase_client: Supabase client instance (uses default if None)
            table_name: Table override (defaults to settings.knowledge_table)
        """
        if supabase_client is None:
            from supabase import create_client
            self.client = create_client(
                settings.supabase_url,
                settings.supabase_api_key
            )
        else:
            self.client = supabase_client

        self.table_name = table_name or settings.knowledge_table
        logger.info(f"SupabaseKnowledgeRepository initialized for table: {self.table_name}")

    @staticmethod
    def build_or_filter(terms: Sequence[str], match_tags: bool) -> str:
        """PostgREST `or` expression matching any term in title, content or tags"""
        clauses = []
        for term in terms:
            clauses.append(f"title.ilike.%{term}%")
            clauses.append(f"content.ilike.%{term}%")
            if match_tags:
                clauses.append(f"tags.cs.{{{term}}}")
        return ",".join(clauses)

    def _search(self, query: KnowledgeQuery) -> List[KnowledgeEntry]:
        try:
            builder = self.client.table(self.table_name).select(KNOWLEDGE_COLUMNS)

            if query.approved_only:
                builder = builder.eq("is_approved", True)

            if query.terms:
                builder = builder.or_(self.build_or_filter(query.terms, query.match_tags))

            response = builder \
                .order("confidence_score", desc=True) \
                .limit(query.limit) \
                .execute()

            return [KnowledgeEntry(**row) for row in response.data or []]

        except Exception as e:
            logger.error(f"Knowledge search failed: {e}")
            raise StoreError(f"Knowledge search failed: {e}") from e

    async def search(self, query: KnowledgeQuery) -> List[KnowledgeEntry]:
        return await asyncio.to_thread(self._search, query)

    def _browse(
        self,
        text: Optional[str],
        category: Optional[str],
        tags: Optional[Sequence[str]],
        limit: int
    ) -> List[KnowledgeEntry]:
        try:
            builder = self.client.table(self.table_name).select("*")

            if text:
                builder = builder.or_(f"title.ilike.%{text}%,content.ilike.%{text}%")
            if category:
                builder = builder.eq("category", category)
            if tags:
                builder = builder.ov("tags", list(tags))

            response = builder \
                .limit(limit) \
                .order("updated_at", desc=True) \
                .execute()

            return [KnowledgeEntry(**row) for row in response.data or []]

        except Exception as e:
            logger.error(f"Knowledge browse failed: {e}")
            raise StoreError(f"Knowledge browse failed: {e}") from e

    async def browse(
        self,
        text: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        limit: int = 10
    ) -> List[KnowledgeEntry]:
        return await asyncio.to_thread(self._browse, text, category, tags, limit)


class InMemoryKnowledgeRepository(KnowledgeRepository):
    """List-backed knowledge store with the same matching rules"""

    def __init__(self, entries: Optional[Sequence[KnowledgeEntry]] = None):
        self.entries: List[KnowledgeEntry] = list(entries or [])

    @staticmethod
    def _matches(entry: KnowledgeEntry, terms: Sequence[str], match_tags: bool) -> bool:
        if not terms:
            return True
        title = entry.title.lower()
        content = entry.content.lower()
        for term in terms:
            needle = term.lower()
            if needle in title or needle in content:
                return True
            # tags.cs.{term} is exact array membership
            if match_tags and term in entry.tags:
                return True
        return False

    async def search(self, query: KnowledgeQuery) -> List[KnowledgeEntry]:
        rows = [
            entry for entry in self.entries
            if (entry.is_approved or not query.approved_only)
            and self._matches(entry, query.terms, query.match_tags)
        ]
        rows.sort(key=lambda e: e.confidence_score or 0.0, reverse=True)
        return rows[:query.limit]

    async def browse(
        self,
        text: Optional[str] = None,
        category: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        limit: int = 10
    ) -> List[KnowledgeEntry]:
        rows = list(self.entries)
        if text:
            rows = [e for e in rows if self._matches(e, [text], match_tags=False)]
        if category:
            rows = [e for e in rows if e.category == category]
        if tags:
            wanted = set(tags)
            rows = [e for e in rows if wanted.intersection(e.tags)]
        rows.sort(key=lambda e: e.updated_at.timestamp() if e.updated_at else 0.0, reverse=True)
        return rows[:limit]
