"""
Unit tests for structured answers, suggestions and follow-up questions
"""
from kb_assistant.models.schemas import KnowledgeSource
from kb_assistant.services import answer_templates as templates


def _source(id: str, category: str, excerpt: str = "Details", confidence: float = 0.9) -> KnowledgeSource:
    return KnowledgeSource(
        id=id,
        title=f"Entry {id}",
        excerpt=excerpt,
        category=category,
        confidence=confidence,
        relevance_score=0.5,
    )


class TestStructuredAnswer:
    def test_single_source(self):
        answer = templates.structured_answer([_source("1", "Returns", "Items can be returned within 30 days")])
        assert answer == "Based on our returns information:\n\nItems can be returned within 30 days\n\n"

    def test_additional_sources_limited_to_two(self):
        sources = [
            _source("1", "Shipping Info", "Top"),
            _source("2", "Returns", "Second"),
            _source("3", "Returns", "Third"),
            _source("4", "Returns", "Fourth"),
        ]
        answer = templates.structured_answer(sources)

        assert answer.startswith("Based on our shipping info information:\n\nTop\n\n")
        assert "Additional relevant information:\n1. Second\n2. Third\n" in answer
        assert "Fourth" not in answer

    def test_low_confidence_adds_contact_sentence(self):
        answer = templates.structured_answer([_source("1", "Returns", confidence=0.5)])
        assert answer.endswith(templates.CONTACT_SUPPORT_SENTENCE)

    def test_high_confidence_has_no_contact_sentence(self):
        answer = templates.structured_answer([_source("1", "Returns", confidence=0.7)])
        assert templates.CONTACT_SUPPORT_SENTENCE not in answer

    def test_no_sources(self):
        assert templates.structured_answer([]) == templates.NO_INFORMATION_ANSWER


class TestSuggestions:
    def test_one_per_distinct_category(self):
        sources = [_source("1", "Returns"), _source("2", "Shipping"), _source("3", "Returns")]
        assert templates.suggestions_for(sources) == [
            "Learn more about Returns",
            "Learn more about Shipping",
        ]

    def test_no_sources(self):
        assert templates.suggestions_for([]) == templates.NO_SOURCE_SUGGESTIONS


class TestFollowUpQuestions:
    def test_general_pool(self):
        assert templates.follow_up_questions_for([_source("1", "Warranty")]) == templates.GENERAL_FOLLOW_UPS

    def test_shipping_first(self):
        follow_ups = templates.follow_up_questions_for([_source("1", "Shipping Info")])
        assert follow_ups == [
            "What are the shipping costs?",
            "How long does delivery take?",
            "How do I contact support?",
        ]

    def test_returns_take_precedence(self):
        follow_ups = templates.follow_up_questions_for(
            [_source("1", "Shipping Info"), _source("2", "Returns")]
        )
        assert follow_ups == [
            "How do I start a return?",
            "What is your return policy?",
            "What are the shipping costs?",
        ]

    def test_category_match_is_case_sensitive(self):
        assert templates.follow_up_questions_for([_source("1", "shipping")]) == templates.GENERAL_FOLLOW_UPS

    def test_pool_not_mutated(self):
        templates.follow_up_questions_for([_source("1", "Returns")])
        assert len(templates.GENERAL_FOLLOW_UPS) == 3
