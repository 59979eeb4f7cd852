"""Email validator: an RFC-light address check on the sanitized value."""

from __future__ import annotations

import re
from typing import Any

from reviewguard.models import ValidationOptions, ValidationResult
from reviewguard.sanitize import sanitize_email
from reviewguard.validators.base import BaseFieldValidator

EMAIL_MIN_LENGTH = 5
EMAIL_MAX_LENGTH = 254

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


class EmailValidator(BaseFieldValidator):
    """Validate an email address.

    Only an empty value short-circuits; every other rule runs so the caller
    sees all problems at once.
    """

    name = "email"

    def validate(
        self, value: Any, options: ValidationOptions | None = None,
    ) -> ValidationResult:
        sanitized = sanitize_email(value)
        if not sanitized:
            return ValidationResult.from_errors("", ["Email is required"])

        errors: list[str] = []
        if len(sanitized) < EMAIL_MIN_LENGTH:
            errors.append(f"Email must be at least {EMAIL_MIN_LENGTH} characters long")
        if len(sanitized) > EMAIL_MAX_LENGTH:
            errors.append(f"Email must be less than {EMAIL_MAX_LENGTH} characters")
        if not _EMAIL_RE.match(sanitized):
            errors.append("Please enter a valid email address")
        if ".." in sanitized:
            errors.append("Email contains invalid consecutive dots")
        if sanitized.startswith(".") or sanitized.endswith("."):
            errors.append("Email cannot start or end with a dot")

        return ValidationResult.from_errors(sanitized, errors)
