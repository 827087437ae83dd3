"""
Repositories package for store access

Provides:
- knowledge_base table (KnowledgeRepository implementations)
- ai_interactions table (InteractionLogRepository implementations)
"""
from kb_assistant.repositories.knowledge_repository import (
    KnowledgeRepository,
    SupabaseKnowledgeRepository,
    InMemoryKnowledgeRepository,
)
from kb_assistant.repositories.interaction_repository import (
    InteractionLogRepository,
    SupabaseInteractionLogRepository,
    InMemoryInteractionLogRepository,
)

__all__ = [
    "KnowledgeRepository",
    "SupabaseKnowledgeRepository",
    "InMemoryKnowledgeRepository",
    "InteractionLogRepository",
    "SupabaseInteractionLogRepository",
    "InMemoryInteractionLogRepository",
]
