"""
Pydantic models for the Knowledge Assistant
"""

from kb_assistant.models.schemas import (
    # Enums
    CustomerType,

    # Store Models
    KnowledgeEntry,
    InteractionLog,
    InteractionStatsRow,
    InteractionStats,

    # Query / Response Models
    CustomerQuery,
    KnowledgeSource,
    AIResponse,
    KnowledgeQuery,

    # Answer Service Contract
    GenerationSource,
    GenerationRequest,
    GenerationResult,

    # Knowledge Search
    KnowledgeSearchRequest,
    KnowledgeSearchHit,
    KnowledgeSearchResponse,
)

__all__ = [
    "CustomerType",
    "KnowledgeEntry",
    "InteractionLog",
    "InteractionStatsRow",
    "InteractionStats",
    "CustomerQuery",
    "KnowledgeSource",
    "AIResponse",
    "KnowledgeQuery",
    "GenerationSource",
    "GenerationRequest",
    "GenerationResult",
    "KnowledgeSearchRequest",
    "KnowledgeSearchHit",
    "KnowledgeSearchResponse",
]
