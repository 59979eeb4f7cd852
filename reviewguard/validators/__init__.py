"""Field validators for reviewguard.

Each validator sanitizes its input, applies its rules in a fixed order and
returns a :class:`~reviewguard.models.ValidationResult` carrying every error
found. The module-level ``validate_*`` functions use default-configured
instances.
"""

from __future__ import annotations

from typing import Any

from reviewguard.models import ValidationOptions, ValidationResult
from reviewguard.validators.base import BaseFieldValidator
from reviewguard.validators.emails import EmailValidator
from reviewguard.validators.names import NameValidator
from reviewguard.validators.passwords import PasswordValidator
from reviewguard.validators.phones import PhoneValidator
from reviewguard.validators.text import TextValidator

REGISTRY: dict[str, type[BaseFieldValidator]] = {
    "email": EmailValidator,
    "password": PasswordValidator,
    "name": NameValidator,
    "phone": PhoneValidator,
    "text": TextValidator,
}

_email = EmailValidator()
_password = PasswordValidator()
_name = NameValidator()
_phone = PhoneValidator()


def validate_email(value: Any) -> ValidationResult:
    return _email.validate(value)


def validate_password(value: Any, options: ValidationOptions | None = None) -> ValidationResult:
    return _password.validate(value, options)


def validate_name(value: Any, options: ValidationOptions | None = None) -> ValidationResult:
    return _name.validate(value, options)


def validate_phone(value: Any) -> ValidationResult:
    return _phone.validate(value)


def validate_text(
    value: Any,
    options: ValidationOptions | None = None,
    field_label: str = "Text",
    required: bool = False,
) -> ValidationResult:
    return TextValidator(label=field_label, required=required).validate(value, options)


__all__ = [
    "REGISTRY",
    "BaseFieldValidator",
    "EmailValidator",
    "NameValidator",
    "PasswordValidator",
    "PhoneValidator",
    "TextValidator",
    "validate_email",
    "validate_name",
    "validate_password",
    "validate_phone",
    "validate_text",
]
