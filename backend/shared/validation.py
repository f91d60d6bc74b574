"""
Input validation, sanitization and token generation.

Free-text fields (item descriptions, pickup notes, group names, profile
fields) pass through sanitize_input() before they are persisted.
"""

import re
import secrets
from typing import Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

_EMAIL_ADAPTER = TypeAdapter(EmailStr)
_PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]{10,}$")
_SCRIPT_PATTERN = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_TAG_PATTERN = re.compile(r"<[^>]*>")


def sanitize_input(value: Optional[str]) -> str:
    """
    Strip all markup from user-supplied text.

    Tags are removed but their text content is kept; script and style
    bodies are dropped entirely. Returns "" for empty input.
    """
    if not value:
        return ""
    trimmed = value.strip()
    without_scripts = _SCRIPT_PATTERN.sub("", trimmed)
    return _TAG_PATTERN.sub("", without_scripts).strip()


def sanitize_optional(value: Optional[str]) -> Optional[str]:
    """Sanitize an optional field, mapping blank results to None."""
    cleaned = sanitize_input(value)
    return cleaned or None


def validate_email(email: str) -> bool:
    """Check an address against the EmailStr rules used by the API models."""
    try:
        _EMAIL_ADAPTER.validate_python(email)
    except PydanticValidationError:
        return False
    return True


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_phone(phone: str) -> bool:
    return bool(_PHONE_PATTERN.match(phone))


def generate_token() -> str:
    """Generate an unguessable invite token (256 bits of entropy)."""
    return secrets.token_urlsafe(32)
