"""Free-text validator for review bodies and optional descriptive fields."""

from __future__ import annotations

import re
from typing import Any

from reviewguard.models import ValidationOptions, ValidationResult
from reviewguard.sanitize import sanitize_text
from reviewguard.validators.base import BaseFieldValidator


class TextValidator(BaseFieldValidator):
    """Sanitize markup out of free text and enforce length bounds.

    ``custom_pattern`` in the options, when set, must match the whole
    sanitized value.
    """

    name = "text"
    defaults = {"min_length": 0, "max_length": 2000}

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        label: str = "Text",
        required: bool = False,
    ) -> None:
        super().__init__(config)
        self.label = label
        self.required = required

    def validate(
        self, value: Any, options: ValidationOptions | None = None,
    ) -> ValidationResult:
        sanitized = sanitize_text(value)
        if not sanitized:
            if self.required:
                return ValidationResult.from_errors("", [f"{self.label} is required"])
            return ValidationResult.from_errors("", [])

        min_length = self.option(options, "min_length")
        max_length = self.option(options, "max_length")
        errors: list[str] = []

        if len(sanitized) < min_length:
            errors.append(f"{self.label} must be at least {min_length} characters long")
        if len(sanitized) > max_length:
            errors.append(f"{self.label} must be less than {max_length} characters")

        custom = options.custom_pattern if options else None
        if custom and re.fullmatch(custom, sanitized) is None:
            errors.append(
                options.custom_pattern_message
                or f"{self.label} is not in the expected format"
            )

        return ValidationResult.from_errors(sanitized, errors)
