"""
Services package

- keywords: keyword extraction, relevance, excerpts, prompts
- answer_generator: external answer-generation backends
- answer_templates: canned answers and follow-ups
- assistant: the retrieval and answer engine
- knowledge_search: direct filtered lookup
"""
from kb_assistant.services.assistant import KnowledgeAssistant, build_assistant
from kb_assistant.services.knowledge_search import KnowledgeSearchService

__all__ = [
    "KnowledgeAssistant",
    "build_assistant",
    "KnowledgeSearchService",
]
