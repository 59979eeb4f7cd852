"""Password strength validator.

Passwords are never sanitized: the original characters go to the
authentication provider for hashing, so the value is judged as typed.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from reviewguard.config import DEFAULT_WEAK_SEQUENCES, DEFAULT_WEAK_WORDS
from reviewguard.models import ValidationOptions, ValidationResult
from reviewguard.validators.base import BaseFieldValidator

logger = logging.getLogger(__name__)

SPECIAL_CHARS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

_UPPERCASE_RE = re.compile(r"[A-Z]")
_LOWERCASE_RE = re.compile(r"[a-z]")
_DIGIT_RE = re.compile(r"[0-9]")
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARS) + "]")
_REPEATED_CHAR_RE = re.compile(r"^(.)\1+\Z", re.DOTALL)

WEAK_PATTERN_MESSAGE = "Password contains common weak patterns"


def _blocklist_pattern(entries: list[str]) -> re.Pattern[str] | None:
    entries = [e for e in entries if e]
    if not entries:
        return None
    return re.compile("|".join(re.escape(e) for e in entries), re.IGNORECASE)


class PasswordValidator(BaseFieldValidator):
    """Check length bounds, character classes and weak patterns."""

    name = "password"
    defaults = {
        "min_length": 8,
        "max_length": 128,
        "require_uppercase": True,
        "require_lowercase": True,
        "require_numbers": True,
        "require_special_chars": True,
    }

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        super().__init__(config)
        self.defaults = {
            **type(self).defaults,
            "min_length": self.config.get("password_min_length", 8),
            "max_length": self.config.get("password_max_length", 128),
        }
        sequences = self.config.get("weak_sequences", list(DEFAULT_WEAK_SEQUENCES))
        words = self.config.get("weak_words", list(DEFAULT_WEAK_WORDS))
        self._weak_patterns: list[tuple[str, re.Pattern[str]]] = [
            ("repeated_character", _REPEATED_CHAR_RE),
        ]
        for label, entries in (("common_sequence", sequences), ("common_word", words)):
            pattern = _blocklist_pattern(list(entries))
            if pattern is not None:
                self._weak_patterns.append((label, pattern))

    def weak_pattern(self, password: str) -> str | None:
        """Return the label of the first weak-pattern family *password* hits."""
        for label, pattern in self._weak_patterns:
            if pattern.search(password):
                return label
        return None

    def validate(
        self, value: Any, options: ValidationOptions | None = None,
    ) -> ValidationResult:
        password = value if isinstance(value, str) else ""
        if not password:
            return ValidationResult.from_errors("", ["Password is required"])

        min_length = self.option(options, "min_length")
        max_length = self.option(options, "max_length")
        errors: list[str] = []

        if len(password) < min_length:
            errors.append(f"Password must be at least {min_length} characters long")
        if len(password) > max_length:
            errors.append(f"Password must be less than {max_length} characters")

        if self.option(options, "require_uppercase") and not _UPPERCASE_RE.search(password):
            errors.append("Password must contain at least one uppercase letter")
        if self.option(options, "require_lowercase") and not _LOWERCASE_RE.search(password):
            errors.append("Password must contain at least one lowercase letter")
        if self.option(options, "require_numbers") and not _DIGIT_RE.search(password):
            errors.append("Password must contain at least one number")
        if self.option(options, "require_special_chars") and not _SPECIAL_RE.search(password):
            errors.append("Password must contain at least one special character")

        weak = self.weak_pattern(password)
        if weak is not None:
            logger.debug("Password rejected by weak-pattern family %s", weak)
            errors.append(WEAK_PATTERN_MESSAGE)

        return ValidationResult.from_errors(password, errors)
