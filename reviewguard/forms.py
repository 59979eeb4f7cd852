"""Whole-form validation for sign-up, sign-in and review submissions.

Every field is validated on every call so a single response lists every
problem. Field keys are snake_case; missing keys read as empty strings.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from reviewguard.models import (
    FormValidationOutcome,
    ValidationOptions,
    ValidationResult,
)
from reviewguard.validators import (
    EmailValidator,
    NameValidator,
    PasswordValidator,
    PhoneValidator,
    TextValidator,
)

PASSWORD_MISMATCH = "Passwords do not match"
PASSWORD_REQUIRED = "Password is required"

RATING_MIN = 1
RATING_MAX = 5

_RATING_RE = re.compile(r"[0-9]+")

_DOCTOR_NAME_OPTIONS = ValidationOptions(min_length=2, max_length=100)
_SHORT_TEXT_OPTIONS = ValidationOptions(max_length=100)
_REVIEW_TEXT_OPTIONS = ValidationOptions(max_length=2000)


def _field(fields: Mapping[str, Any], key: str) -> Any:
    value = fields.get(key)
    return "" if value is None else value


class _OutcomeBuilder:
    def __init__(self) -> None:
        self.sanitized: dict[str, str | int | None] = {}
        self.errors: dict[str, list[str]] = {}

    def add(self, field: str, result: ValidationResult) -> None:
        if not result.is_valid:
            self.errors[field] = list(result.errors)

    def fail(self, field: str, message: str) -> None:
        self.errors.setdefault(field, []).append(message)

    def build(self) -> FormValidationOutcome:
        return FormValidationOutcome(
            is_valid=not self.errors,
            sanitized_data=self.sanitized,
            errors=self.errors,
            field_errors={field: errs[0] for field, errs in self.errors.items()},
        )


class FormValidator:
    """Form orchestrators built on one set of configured field validators."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        config = config or {}
        self.email = EmailValidator(config)
        self.password = PasswordValidator(config)
        self.name = NameValidator(config)
        self.phone = PhoneValidator(config)
        self.doctor_name = NameValidator(config, label="Doctor name")

    def sign_up(
        self,
        fields: Mapping[str, Any],
        password_options: ValidationOptions | None = None,
    ) -> FormValidationOutcome:
        out = _OutcomeBuilder()
        password = _field(fields, "password")
        phone = _field(fields, "phone")

        name_result = self.name.validate(_field(fields, "name"))
        email_result = self.email.validate(_field(fields, "email"))
        password_result = self.password.validate(password, password_options)
        phone_result = self.phone.validate(phone) if phone else None

        out.add("name", name_result)
        out.add("email", email_result)
        out.add("password", password_result)
        if password != _field(fields, "confirm_password"):
            out.fail("confirm_password", PASSWORD_MISMATCH)
        if phone_result is not None:
            out.add("phone", phone_result)

        out.sanitized = {
            "name": name_result.sanitized_value,
            "email": email_result.sanitized_value,
            "password": password_result.sanitized_value,
            "phone": (phone_result.sanitized_value or None) if phone_result else None,
        }
        return out.build()

    def sign_in(self, fields: Mapping[str, Any]) -> FormValidationOutcome:
        """Format check only; password strength is not re-judged at sign-in."""
        out = _OutcomeBuilder()
        password = _field(fields, "password")
        email_result = self.email.validate(_field(fields, "email"))

        out.add("email", email_result)
        if not password:
            out.fail("password", PASSWORD_REQUIRED)

        out.sanitized = {
            "email": email_result.sanitized_value,
            "password": password if isinstance(password, str) else "",
        }
        return out.build()

    def review(self, fields: Mapping[str, Any]) -> FormValidationOutcome:
        out = _OutcomeBuilder()
        results = {
            "doctor_name": self.doctor_name.validate(
                _field(fields, "doctor_name"), _DOCTOR_NAME_OPTIONS,
            ),
            "doctor_specialization": TextValidator(label="Specialization").validate(
                _field(fields, "doctor_specialization"), _SHORT_TEXT_OPTIONS,
            ),
            "clinic_name": TextValidator(label="Clinic name").validate(
                _field(fields, "clinic_name"), _SHORT_TEXT_OPTIONS,
            ),
            "doctor_location": TextValidator(label="Location").validate(
                _field(fields, "doctor_location"), _SHORT_TEXT_OPTIONS,
            ),
            "review_text": TextValidator(label="Review").validate(
                _field(fields, "review_text"), _REVIEW_TEXT_OPTIONS,
            ),
        }
        for field, result in results.items():
            out.add(field, result)
            out.sanitized[field] = result.sanitized_value or None

        rating = _parse_rating(fields.get("rating"))
        if rating is None:
            out.fail("rating", f"Rating must be a whole number from {RATING_MIN} to {RATING_MAX}")
        out.sanitized["rating"] = rating
        return out.build()


def _parse_rating(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if _RATING_RE.fullmatch(value) is None:
            return None
        value = int(value)
    if not isinstance(value, int):
        return None
    if RATING_MIN <= value <= RATING_MAX:
        return value
    return None


_default = FormValidator()


def validate_sign_up_form(
    fields: Mapping[str, Any],
    password_options: ValidationOptions | None = None,
) -> FormValidationOutcome:
    return _default.sign_up(fields, password_options)


def validate_sign_in_form(fields: Mapping[str, Any]) -> FormValidationOutcome:
    return _default.sign_in(fields)


def validate_review_form(fields: Mapping[str, Any]) -> FormValidationOutcome:
    return _default.review(fields)
