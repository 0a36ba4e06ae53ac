"""Log sanitizer - keeps chat text safe to write to log files.

Household chat messages go to the log on every command; contact details and
pasted credentials are replaced before they reach disk.
"""

import re

# Patterns to detect and redact sensitive data
SENSITIVE_PATTERNS = [
    # Email addresses
    (r'\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b', '[EMAIL]'),

    # Phone numbers (UK and US shapes)
    (r'\b(?:\+44|0)[\s.-]?\d{2,4}[\s.-]?\d{3,4}[\s.-]?\d{3,4}\b', '[PHONE]'),
    (r'\b\d{3}[-.\s]?\d{3}[-.\s]?\d{4}\b', '[PHONE]'),

    # Card numbers
    (r'\b\d{4}[\s-]?\d{4}[\s-]?\d{4}[\s-]?\d{4}\b', '[CARD]'),

    # key=value secrets, e.g. "wifi password: hunter22"
    (r'(password|passcode|pin|secret|token)(\s*[:=]\s*|\s+is\s+)\S+', r'\1=[REDACTED]'),

    # Discord bot tokens (three dot-separated base64 segments)
    (r'[A-Za-z0-9_-]{23,28}\.[A-Za-z0-9_-]{6,7}\.[A-Za-z0-9_-]{27,}', '[BOT_TOKEN]'),
]

_COMPILED_PATTERNS = [(re.compile(p, re.IGNORECASE), r) for p, r in SENSITIVE_PATTERNS]


def sanitize_log(text: str) -> str:
    """Replace sensitive substrings with placeholders."""
    if not text:
        return text

    result = text
    for pattern, replacement in _COMPILED_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def sanitize_for_log(value, max_length: int = 80) -> str:
    """Sanitize and truncate a chat message for a single log line.

    Args:
        value: Message text (None is allowed for attachment-only messages)
        max_length: Maximum length of returned string

    Returns:
        Single-line, sanitized, truncated string
    """
    if value is None:
        return "<empty>"

    sanitized = sanitize_log(str(value)).replace("\n", " ")
    if len(sanitized) > max_length:
        return sanitized[:max_length] + "..."
    return sanitized
