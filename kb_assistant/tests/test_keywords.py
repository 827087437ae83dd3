"""
Unit tests for keyword extraction, relevance and prompt helpers
"""
import pytest

from kb_assistant.models.schemas import KnowledgeEntry, KnowledgeSource
from kb_assistant.services.keywords import (
    build_context,
    build_prompt,
    calculate_relevance,
    create_excerpt,
    extract_keywords,
    tokenize,
)


def _source(**overrides) -> KnowledgeSource:
    data = {
        "id": "1",
        "title": "Return Policy",
        "excerpt": "Items can be returned within 30 days",
        "category": "Returns",
        "confidence": 0.9,
        "relevance_score": 0.4,
    }
    data.update(overrides)
    return KnowledgeSource(**data)


class TestTokenize:
    def test_lowercases_and_strips_punctuation(self):
        assert tokenize("What's your RETURN policy?!") == ["whats", "your", "return", "policy"]

    def test_collapses_whitespace(self):
        assert tokenize("  brake   pads\n\tprice ") == ["brake", "pads", "price"]


class TestExtractKeywords:
    def test_filters_stop_words(self):
        assert extract_keywords("What is the warranty on brake pads?") == [
            "warranty", "brake", "pads"
        ]

    def test_important_keywords_always_kept(self):
        keywords = extract_keywords("Can you help me with the address?")
        assert "help" in keywords
        assert "address" in keywords

    @pytest.mark.parametrize("word", ["address", "return", "refund", "shipping", "warranty", "fee"])
    def test_allowlisted_word_survives(self, word):
        assert word in extract_keywords(f"is it {word}")

    def test_short_words_dropped(self):
        assert extract_keywords("my car xy abs sensor") == ["car", "abs", "sensor"]

    def test_deduplicates_preserving_order(self):
        assert extract_keywords("refund refund shipping refund") == ["refund", "shipping"]

    def test_caps_at_six(self):
        keywords = extract_keywords("alpha bravo charlie delta echo foxtrot golf hotel")
        assert keywords == ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot"]

    def test_falls_back_to_longer_stop_words(self):
        assert extract_keywords("what about those?") == ["what", "about", "those"]

    def test_falls_back_to_any_word(self):
        assert extract_keywords("is it") == ["is", "it"]

    @pytest.mark.parametrize("question", ["a", "Is it?", "why", "the the the", "xyz", "HOW DO I"])
    def test_never_empty_for_alphabetic_input(self, question):
        assert extract_keywords(question)

    def test_empty_for_punctuation_only(self):
        assert extract_keywords("?!...") == []
        assert extract_keywords("") == []


class TestCalculateRelevance:
    def test_counts_long_words_contained_in_entry(self):
        entry = KnowledgeEntry(
            id="1",
            title="Return Policy",
            content="Items can be returned within 30 days",
        )
        # what, is, your, return, policy -> "return" and "policy" match
        assert calculate_relevance("What is your return policy?", entry) == pytest.approx(0.4)

    def test_short_words_never_count(self):
        entry = KnowledgeEntry(id="1", title="Fee", content="the fee is low")
        assert calculate_relevance("fee low", entry) == 0.0

    def test_substring_containment(self):
        entry = KnowledgeEntry(id="1", title="Returns", content="")
        assert calculate_relevance("return", entry) == 1.0

    def test_no_words(self):
        entry = KnowledgeEntry(id="1", title="Anything", content="")
        assert calculate_relevance("", entry) == 0.0

    def test_bounded(self):
        entry = KnowledgeEntry(id="1", title="brake pads brake", content="brake")
        assert 0.0 <= calculate_relevance("brake brake brake", entry) <= 1.0


class TestCreateExcerpt:
    def test_short_content_unchanged(self):
        assert create_excerpt("short text") == "short text"

    def test_cuts_at_last_space(self):
        content = "word " * 60
        excerpt = create_excerpt(content)
        assert excerpt.endswith("word...")
        assert len(excerpt) <= 203

    def test_no_space_hard_cut(self):
        assert create_excerpt("x" * 250) == "x" * 200 + "..."

    def test_custom_length(self):
        assert create_excerpt("one two three", max_length=8) == "one two..."


class TestPromptHelpers:
    def test_build_context(self):
        sources = [_source(), _source(id="2", title="Refunds", excerpt="Refunds in 7 days")]
        assert build_context(sources) == (
            "Return Policy: Items can be returned within 30 days\n\n"
            "Refunds: Refunds in 7 days"
        )

    def test_build_prompt_lists_sources_and_rules(self):
        prompt = build_prompt("Can I return this?", [_source()])
        assert 'A customer has asked: "Can I return this?"' in prompt
        assert "1. Return Policy (Returns)\n   Items can be returned within 30 days" in prompt
        assert "ONLY the information provided above" in prompt
        assert "Don't make up information" in prompt
        assert prompt.endswith("Your Response:")
