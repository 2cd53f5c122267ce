"""Lenient well-formedness checks for string ``format`` rules."""

from __future__ import annotations

import re
from urllib.parse import urlparse

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{0,15}$")

# Separators people type inside phone numbers
_PHONE_SEPARATORS = re.compile(r"[\s\-().]")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value))


def is_valid_url(value: str) -> bool:
    """Scheme and host must both be present (``https://example.com``)."""
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc) and " " not in value.strip()


def is_valid_phone(value: str) -> bool:
    """Up to 16 digits, optional leading ``+``, common separators ignored."""
    return bool(PHONE_RE.match(_PHONE_SEPARATORS.sub("", value)))


FORMAT_CHECKS = {
    "email": is_valid_email,
    "url": is_valid_url,
    "phone": is_valid_phone,
}

FORMAT_MESSAGES = {
    "email": "Invalid email format",
    "url": "Invalid URL format",
    "phone": "Invalid phone number format",
}
