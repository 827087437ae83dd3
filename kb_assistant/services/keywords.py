"""
Text utilities for knowledge retrieval

Pure functions only (no I/O): keyword extraction for the search cascade,
the word-containment relevance score used for ranking, excerpts, and the
context/prompt strings handed to the answer service.
"""
import re
from typing import List, Sequence

from kb_assistant.models.schemas import KnowledgeEntry, KnowledgeSource

MAX_KEYWORDS = 6
FALLBACK_KEYWORDS = 3
EXCERPT_LENGTH = 200

STOP_WORDS = frozenset({
    'what', 'is', 'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by',
    'how', 'when', 'where', 'why', 'who', 'which', 'can', 'could', 'would', 'should', 'will', 'may', 'might',
    'do', 'does', 'did', 'have', 'has', 'had', 'be', 'am', 'are', 'was', 'were', 'been', 'being',
    'i', 'you', 'he', 'she', 'it', 'we', 'they', 'me', 'him', 'her', 'us', 'them', 'my', 'your', 'his',
    'its', 'our', 'their', 'this', 'that', 'these', 'those', 'there', 'here', 'then', 'than',
    'about', 'into', 'through', 'during', 'before', 'after', 'above', 'below', 'up', 'down', 'out', 'off',
    'over', 'under', 'again', 'further', 'once', 'get', 'got', 'getting', 'please',
})

# Business terms kept regardless of length or stop-word status
IMPORTANT_KEYWORDS = frozenset({
    'address', 'phone', 'email', 'contact', 'return', 'refund', 'shipping', 'delivery', 'payment', 'price',
    'cost', 'fee', 'warranty', 'guarantee', 'policy', 'terms', 'conditions', 'account', 'login', 'password',
    'order', 'cancel', 'exchange', 'support', 'help', 'service', 'location', 'hours', 'time', 'schedule',
    'product', 'item', 'buy', 'purchase', 'sell', 'sale', 'discount', 'coupon', 'promo', 'offer',
})

_PUNCTUATION = re.compile(r"[^\w\s]")


def tokenize(text: str) -> List[str]:
    """Lowercase, drop punctuation, split on whitespace."""
    return _PUNCTUATION.sub("", text.lower()).split()


def extract_keywords(question: str) -> List[str]:
    """
    Extract search keywords from a customer question

    Important business keywords are always kept. Other words are kept when
    they are at least 3 characters and not stop words. If that leaves
    nothing, the first few longer words are taken regardless of stop words,
    then the first few words of any length, so a question with at least one
    word never yields an empty list.

    Args:
        question: Raw customer question

    Returns:
        Up to 6 unique keywords in question order
    """
    words = tokenize(question)
    keywords: List[str] = []

    for word in words:
        if word in IMPORTANT_KEYWORDS:
            keywords.append(word)
            continue
        if word in STOP_WORDS:
            continue
        if len(word) >= 3:
            keywords.append(word)

    if not keywords:
        keywords = [word for word in words if len(word) >= 3][:FALLBACK_KEYWORDS]

    if not keywords:
        keywords = words[:FALLBACK_KEYWORDS]

    return list(dict.fromkeys(keywords))[:MAX_KEYWORDS]


def calculate_relevance(question: str, entry: KnowledgeEntry) -> float:
    """
    Share of question words (longer than 3 characters) found in the entry

    Plain substring containment against "title content", divided by the
    total number of question words and capped at 1.0.
    """
    words = tokenize(question)
    entry_text = f"{entry.title} {entry.content}".lower()

    match_count = sum(1 for word in words if len(word) > 3 and word in entry_text)

    return min(1.0, match_count / max(1, len(words)))


def create_excerpt(content: str, max_length: int = EXCERPT_LENGTH) -> str:
    """Truncate at the last space before max_length and mark with '...'."""
    if len(content) <= max_length:
        return content

    truncated = content[:max_length]
    last_space = truncated.rfind(' ')

    if last_space > 0:
        return truncated[:last_space] + '...'
    return truncated + '...'


def build_context(sources: Sequence[KnowledgeSource]) -> str:
    """One "title: excerpt" block per source."""
    return "\n\n".join(f"{source.title}: {source.excerpt}" for source in sources)


def build_prompt(question: str, sources: Sequence[KnowledgeSource]) -> str:
    """Full instruction prompt restricting the answer to the given sources."""
    source_info = "\n\n".join(
        f"{index}. {source.title} ({source.category})\n   {source.excerpt}"
        for index, source in enumerate(sources, start=1)
    )

    return f"""You are a customer service AI assistant. A customer has asked: "{question}"

Based on our company's knowledge base, here are the relevant policies and information:

{source_info}

Please provide a helpful, accurate response to the customer's question using ONLY the information provided above. Follow these guidelines:

1. Be direct and helpful
2. Reference specific policies when relevant
3. If the question asks about return policies, shipping, payments, etc., provide the specific details from our policies
4. If information is missing, acknowledge what you can answer and suggest contacting support for additional details
5. Keep the response conversational but professional
6. Don't make up information not contained in the provided sources

Customer Question: {question}

Your Response:"""
