"""
Canned answers, suggestions and follow-up questions

Used when the answer service is unavailable and for the terminal
no-results / technical-difficulties responses.
"""
from typing import List, Sequence

from kb_assistant.models.schemas import KnowledgeSource

NO_INFORMATION_ANSWER = (
    "I couldn't find specific information about your question in our knowledge base. "
    "Please contact our support team for personalized assistance."
)

NO_RESULTS_ANSWER = (
    "I couldn't find specific information about your question in our knowledge base. "
    "Our support team would be happy to help you with personalized assistance."
)
NO_RESULTS_CONFIDENCE = 0.1
NO_RESULTS_SUGGESTIONS = [
    "Contact our support team",
    "Check our FAQ section",
    "Try rephrasing your question",
]
NO_RESULTS_FOLLOW_UPS = [
    "How can I contact support?",
    "What are your business hours?",
    "Do you have a FAQ section?",
]

ERROR_ANSWER = (
    "I'm experiencing technical difficulties right now. Please try again in a moment "
    "or contact our support team for immediate assistance."
)
ERROR_SUGGESTIONS = ["Try again later", "Contact support"]
ERROR_FOLLOW_UPS = ["How can I contact support?"]

NO_SOURCE_SUGGESTIONS = [
    "Try asking about our general policies",
    "Check our FAQ section",
    "Contact our support team directly",
]

GENERAL_FOLLOW_UPS = [
    "How do I contact support?",
    "What are your business hours?",
    "Is there anything else I should know?",
]
SHIPPING_FOLLOW_UPS = ["What are the shipping costs?", "How long does delivery take?"]
RETURN_FOLLOW_UPS = ["How do I start a return?", "What is your return policy?"]

CONTACT_SUPPORT_SENTENCE = (
    "For more detailed information or if you have specific questions, "
    "please contact our support team."
)
LOW_CONFIDENCE_THRESHOLD = 0.7
MAX_FOLLOW_UPS = 3


def structured_answer(sources: Sequence[KnowledgeSource]) -> str:
    """
    Build an answer directly from the ranked sources

    Top source first, up to two more as a numbered list, and a pointer to
    support when any source has low stored confidence.
    """
    if not sources:
        return NO_INFORMATION_ANSWER

    top_source = sources[0]
    answer = f"Based on our {top_source.category.lower()} information:\n\n"
    answer += f"{top_source.excerpt}\n\n"

    if len(sources) > 1:
        answer += "Additional relevant information:\n"
        for index, source in enumerate(sources[1:3], start=1):
            answer += f"{index}. {source.excerpt}\n"
        answer += "\n"

    if any(source.confidence < LOW_CONFIDENCE_THRESHOLD for source in sources):
        answer += CONTACT_SUPPORT_SENTENCE

    return answer


def suggestions_for(sources: Sequence[KnowledgeSource]) -> List[str]:
    """One "Learn more" suggestion per category, in ranking order."""
    if not sources:
        return list(NO_SOURCE_SUGGESTIONS)

    categories = dict.fromkeys(source.category for source in sources)
    return [f"Learn more about {category}" for category in categories]


def follow_up_questions_for(sources: Sequence[KnowledgeSource]) -> List[str]:
    """Category-specific follow-ups first, then the general pool, three total."""
    follow_ups = list(GENERAL_FOLLOW_UPS)

    if any("Shipping" in source.category for source in sources):
        follow_ups = SHIPPING_FOLLOW_UPS + follow_ups

    if any("Return" in source.category for source in sources):
        follow_ups = RETURN_FOLLOW_UPS + follow_ups

    return follow_ups[:MAX_FOLLOW_UPS]
