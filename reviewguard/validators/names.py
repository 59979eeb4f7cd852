"""Person-name validator."""

from __future__ import annotations

import re
from typing import Any

from reviewguard.models import ValidationOptions, ValidationResult
from reviewguard.sanitize import sanitize_name
from reviewguard.validators.base import BaseFieldValidator

_NAME_RE = re.compile(r"^[a-zA-Z\s\-'.]+$")


class NameValidator(BaseFieldValidator):
    name = "name"
    defaults = {"min_length": 2, "max_length": 50}

    def __init__(
        self, config: dict[str, Any] | None = None, label: str = "Name",
    ) -> None:
        super().__init__(config)
        self.label = label

    def validate(
        self, value: Any, options: ValidationOptions | None = None,
    ) -> ValidationResult:
        sanitized = sanitize_name(value)
        min_length = self.option(options, "min_length")
        max_length = self.option(options, "max_length")
        errors: list[str] = []

        if not sanitized:
            errors.append(f"{self.label} is required")
        elif len(sanitized) < min_length:
            errors.append(f"{self.label} must be at least {min_length} characters long")
        elif len(sanitized) > max_length:
            errors.append(f"{self.label} must be less than {max_length} characters")

        if sanitized and not _NAME_RE.match(sanitized):
            errors.append(
                f"{self.label} can only contain letters, spaces, hyphens, apostrophes, and dots"
            )

        return ValidationResult.from_errors(sanitized, errors)
