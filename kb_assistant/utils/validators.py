"""
Input validation utilities
"""
from typing import Any

from kb_assistant.utils.errors import InvalidQueryError


def sanitize_input(text: str, max_length: int = 2000) -> str:
    """
    Sanitize user input

    Args:
        text: Input text to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized text
    """
    # Remove null bytes
    text = text.replace('\x00', '')

    # Truncate to max length
    if len(text) > max_length:
        text = text[:max_length]

    return text.strip()


def ensure_present(value: Any, field: str) -> None:
    """Raise InvalidQueryError if value is missing or blank."""
    if value is None or (isinstance(value, str) and not value.strip()) or value == []:
        raise InvalidQueryError(f"{field} is required")
