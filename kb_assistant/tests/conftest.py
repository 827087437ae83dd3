"""
pytest configuration and shared fixtures
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from kb_assistant.config import Settings
from kb_assistant.models.schemas import GenerationResult, KnowledgeEntry
from kb_assistant.repositories.interaction_repository import InMemoryInteractionLogRepository
from kb_assistant.repositories.knowledge_repository import InMemoryKnowledgeRepository
from kb_assistant.services.answer_generator import AnswerGenerator
from kb_assistant.services.assistant import KnowledgeAssistant


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from any local .env"""
    return Settings(
        _env_file=None,
        supabase_url="https://example.supabase.co",
        supabase_key="anon-key",
        answer_backend="none",
        generation_timeout_seconds=1.0,
    )


@pytest.fixture
def return_policy_entry() -> KnowledgeEntry:
    return KnowledgeEntry(
        id="kb-return",
        title="Return Policy",
        content="Items can be returned within 30 days",
        category="Returns",
        confidence_score=0.9,
        tags=["return", "refund"],
        is_approved=True,
    )


@pytest.fixture
def knowledge_entries(return_policy_entry) -> list:
    """Small mixed knowledge base"""
    return [
        return_policy_entry,
        KnowledgeEntry(
            id="kb-shipping",
            title="Shipping Rates",
            content="Standard shipping takes 3-5 business days and costs RM10 within Peninsular Malaysia.",
            category="Shipping Info",
            confidence_score=0.85,
            tags=["shipping", "delivery"],
            is_approved=True,
        ),
        KnowledgeEntry(
            id="kb-warranty",
            title="Warranty Coverage",
            content="Brake pads and filters carry a 6 month warranty against manufacturing defects.",
            category="Warranty",
            confidence_score=0.6,
            tags=["warranty"],
            is_approved=True,
        ),
        KnowledgeEntry(
            id="kb-draft",
            title="Store Address",
            content="Our warehouse address is Lot 12, Jalan Perusahaan, Shah Alam.",
            category="Contact",
            confidence_score=0.4,
            tags=["address"],
            is_approved=False,
        ),
    ]


@pytest.fixture
def knowledge_repo(knowledge_entries) -> InMemoryKnowledgeRepository:
    return InMemoryKnowledgeRepository(knowledge_entries)


@pytest.fixture
def interaction_repo() -> InMemoryInteractionLogRepository:
    return InMemoryInteractionLogRepository()


@pytest.fixture
def generator() -> MagicMock:
    """Answer generator that reports success with a fixed reply"""
    mock = MagicMock(spec=AnswerGenerator)
    mock.generate = AsyncMock(
        return_value=GenerationResult(success=True, response="Generated answer", tokens_used=42)
    )
    return mock


@pytest.fixture
def assistant(knowledge_repo, interaction_repo, generator, test_settings) -> KnowledgeAssistant:
    return KnowledgeAssistant(
        knowledge_repo=knowledge_repo,
        interaction_repo=interaction_repo,
        generator=generator,
        config=test_settings,
    )


@pytest.fixture
def mock_supabase():
    """Chainable mock of the supabase-py query builder"""
    client = MagicMock()
    client.table.return_value = client
    client.select.return_value = client
    client.insert.return_value = client
    client.update.return_value = client
    client.eq.return_value = client
    client.gte.return_value = client
    client.or_.return_value = client
    client.ov.return_value = client
    client.order.return_value = client
    client.limit.return_value = client
    client.execute.return_value = MagicMock(data=[], count=0)
    return client
