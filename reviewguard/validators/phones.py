"""Phone-number validator. Permissive so international formats pass."""

from __future__ import annotations

import re
from typing import Any

from reviewguard.models import ValidationOptions, ValidationResult
from reviewguard.sanitize import digits_only, sanitize_phone
from reviewguard.validators.base import BaseFieldValidator

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15

_PHONE_RE = re.compile(r"^\+?[0-9\s\-().]{10,}$")


class PhoneValidator(BaseFieldValidator):
    name = "phone"

    def validate(
        self, value: Any, options: ValidationOptions | None = None,
    ) -> ValidationResult:
        sanitized = sanitize_phone(value)
        if not sanitized:
            return ValidationResult.from_errors("", ["Phone number is required"])

        errors: list[str] = []
        digit_count = len(digits_only(sanitized))
        if digit_count < PHONE_MIN_DIGITS:
            errors.append(f"Phone number must contain at least {PHONE_MIN_DIGITS} digits")
        elif digit_count > PHONE_MAX_DIGITS:
            errors.append(f"Phone number must contain no more than {PHONE_MAX_DIGITS} digits")

        if not _PHONE_RE.match(sanitized):
            errors.append("Please enter a valid phone number")

        return ValidationResult.from_errors(sanitized, errors)
