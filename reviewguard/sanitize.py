"""Input sanitization utilities for reviewguard.

Every form value passes through one of these before a validator judges it.
They are pure ``str -> str`` transforms: non-string input becomes ``""`` and
nothing here raises.

Regex stripping of markup is a defense-in-depth heuristic. Parameterized
queries and contextual output encoding remain the storage and rendering
layers' job.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Any, Callable

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")

_SCRIPT_BLOCK = re.compile(
    r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>",
    re.IGNORECASE,
)
_TAG = re.compile(r"<[^>]*>")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+\s*=", re.IGNORECASE)

_QUOTES_AND_BRACKETS = re.compile(r"[<>'\"]")
_PHONE_DISALLOWED = re.compile(r"[^0-9\s\-+().]")
_DIGITS = re.compile(r"[0-9]")
_NAME_DISALLOWED = re.compile(r"[^A-Za-z0-9_\s\-'.]")
_WHITESPACE_RUN = re.compile(r"\s+")


def _nfc(text: str) -> str:
    return unicodedata.normalize("NFC", text)


def _until_stable(clean: Callable[[str], str], value: Any) -> str:
    """Apply *clean* until it stops changing the text, then trim.

    A single pass can splice a new match out of the leftovers of an old one
    (``jajavascript:vascript:``); repeating the fixed-order pass makes every
    sanitizer idempotent.
    """
    if not isinstance(value, str):
        return ""
    text = value
    while True:
        cleaned = clean(text).strip()
        if cleaned == text:
            return cleaned
        text = cleaned


def _clean_text(text: str) -> str:
    text = text.strip()
    text = _CONTROL_CHARS.sub("", text)
    text = _SCRIPT_BLOCK.sub("", text)
    text = _TAG.sub("", text)
    text = _JS_PROTOCOL.sub("", text)
    text = _EVENT_HANDLER.sub("", text)
    return _nfc(text)


def _clean_email(text: str) -> str:
    text = text.strip().lower()
    text = _CONTROL_CHARS.sub("", text)
    text = _QUOTES_AND_BRACKETS.sub("", text)
    return _nfc(text)


def _clean_phone(text: str) -> str:
    text = text.strip()
    text = _PHONE_DISALLOWED.sub("", text)
    return _nfc(text)


def _clean_name(text: str) -> str:
    text = text.strip()
    text = _CONTROL_CHARS.sub("", text)
    text = _QUOTES_AND_BRACKETS.sub("", text)
    text = _DIGITS.sub("", text)
    text = _NAME_DISALLOWED.sub("", text)
    text = _WHITESPACE_RUN.sub(" ", text)
    return _nfc(text)


def sanitize_text(value: Any) -> str:
    """Clean free text.

    Steps:
    1. Trim surrounding whitespace
    2. Strip C0/C1 control characters
    3. Remove ``<script>...</script>`` blocks
    4. Strip remaining tags
    5. Strip ``javascript:`` protocol prefixes
    6. Strip inline event-handler attributes (``onclick=`` and friends)
    7. Unicode NFC normalization
    """
    return _until_stable(_clean_text, value)


def sanitize_email(value: Any) -> str:
    """Trim, lowercase, and drop control characters and ``<>'"``."""
    return _until_stable(_clean_email, value)


def sanitize_phone(value: Any) -> str:
    """Keep only digits, whitespace and ``-+().``."""
    return _until_stable(_clean_phone, value)


def sanitize_name(value: Any) -> str:
    """Reduce a person name to ASCII letters, spaces, hyphens, apostrophes and dots.

    Digits and symbols are dropped rather than rejected, so ``"John123!!"``
    becomes ``"John"``. Any Unicode whitespace run becomes one space.
    """
    return _until_stable(_clean_name, value)


def digits_only(value: str) -> str:
    return re.sub(r"\D", "", value, flags=re.ASCII)
