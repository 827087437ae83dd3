"""
Knowledge Search Service

Direct, filtered lookup over the knowledge base for chatbot and workflow
integrations that want raw entries rather than a composed answer.
"""
from typing import Optional

from kb_assistant.models.schemas import (
    KnowledgeEntry,
    KnowledgeSearchHit,
    KnowledgeSearchRequest,
    KnowledgeSearchResponse,
)
from kb_assistant.repositories.knowledge_repository import KnowledgeRepository
from kb_assistant.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 10
MAX_LIMIT = 50
MIN_SCORE = 0.1


def score_entry(entry: KnowledgeEntry, query: str) -> float:
    """
    Weighted match of the whole query string

    Title match +3, content match +1, +2 per tag containing the query,
    never below 0.1.
    """
    query_lower = query.lower()
    score = 0.0

    if query_lower in entry.title.lower():
        score += 3
    if query_lower in entry.content.lower():
        score += 1

    score += 2 * sum(1 for tag in entry.tags if query_lower in tag.lower())

    return max(score, MIN_SCORE)


class KnowledgeSearchService:
    """Filtered knowledge lookup with a simple relevance score per hit"""

    def __init__(self, knowledge_repo: KnowledgeRepository):
        self.knowledge_repo = knowledge_repo

    async def search(self, request: KnowledgeSearchRequest) -> KnowledgeSearchResponse:
        """
        Search by text, category and tags

        Args:
            request: Filters; a missing or non-positive limit means 10, capped at 50

        Returns:
            KnowledgeSearchResponse, newest entries first

        Raises:
            StoreError: If the knowledge store fails
        """
        limit = request.limit if request.limit and request.limit > 0 else DEFAULT_LIMIT
        limit = min(limit, MAX_LIMIT)

        entries = await self.knowledge_repo.browse(
            text=request.query,
            category=request.category,
            tags=request.tags,
            limit=limit,
        )
        logger.info(f"Knowledge search returned {len(entries)} entries")

        return KnowledgeSearchResponse(
            success=True,
            count=len(entries),
            query_params={
                "query": request.query,
                "category": request.category,
                "tags": request.tags,
                "limit": limit,
            },
            data=[self._to_hit(entry, request.query) for entry in entries],
        )

    @staticmethod
    def _to_hit(entry: KnowledgeEntry, query: Optional[str]) -> KnowledgeSearchHit:
        return KnowledgeSearchHit(
            id=entry.id,
            title=entry.title,
            content=entry.content,
            category=entry.category,
            tags=entry.tags,
            updated_at=entry.updated_at,
            relevance_score=score_entry(entry, query) if query else 1.0,
        )
