"""
FastAPI dependencies

Services are built lazily on first use and shared across requests; tests
replace them through `app.dependency_overrides`.
"""
from functools import lru_cache

from kb_assistant.repositories.knowledge_repository import SupabaseKnowledgeRepository
from kb_assistant.services.assistant import KnowledgeAssistant, build_assistant
from kb_assistant.services.knowledge_search import KnowledgeSearchService


@lru_cache()
def get_assistant() -> KnowledgeAssistant:
    """Shared assistant wired to Supabase"""
    return build_assistant()


@lru_cache()
def get_knowledge_search() -> KnowledgeSearchService:
    """Shared knowledge search service"""
    return KnowledgeSearchService(SupabaseKnowledgeRepository())
