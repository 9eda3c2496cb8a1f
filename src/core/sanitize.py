"""Input sanitation for message-board content - Pure functions."""

import re


MAX_INPUT_LENGTH = 1000
MAX_REPLY_LENGTH = 500

DISALLOWED_CONTENT_ERROR = "Message contains disallowed content"

MALICIOUS_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"<iframe", re.IGNORECASE),
    re.compile(r"<object", re.IGNORECASE),
    re.compile(r"<embed", re.IGNORECASE),
)


def sanitize_input(text: str | None, max_length: int = MAX_INPUT_LENGTH) -> str:
    """Remove angle brackets, trim, and cap the length.

    Pure function. Non-string input becomes an empty string.
    """
    if not isinstance(text, str):
        return ""
    return re.sub(r"[<>]", "", text).strip()[:max_length]


def contains_malicious_content(text: str | None) -> bool:
    """Check for script-injection patterns.

    Pure function.
    """
    if not isinstance(text, str):
        return False
    return any(pattern.search(text) for pattern in MALICIOUS_PATTERNS)


def validate_reply_content(text: str) -> str | None:
    """Validate sanitized reply content.

    Pure function.

    Returns:
        An error message, or None if the content is acceptable
    """
    if len(text) == 0:
        return "Reply content cannot be empty"
    if len(text) > MAX_REPLY_LENGTH:
        return f"Reply content cannot exceed {MAX_REPLY_LENGTH} characters"
    return None
