"""Pydantic data models for reviewguard."""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_FIELD_LENGTH = 10_000


class ValidationResult(BaseModel):
    """Verdict for a single field."""

    is_valid: bool
    sanitized_value: str = ""
    errors: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _valid_iff_no_errors(self) -> ValidationResult:
        if self.is_valid != (not self.errors):
            raise ValueError("is_valid must be True exactly when errors is empty")
        return self

    @classmethod
    def from_errors(cls, sanitized_value: str, errors: list[str]) -> ValidationResult:
        return cls(is_valid=not errors, sanitized_value=sanitized_value, errors=errors)


class ValidationOptions(BaseModel):
    """Per-call validator options. ``None`` means the validator's own default."""

    model_config = ConfigDict(frozen=True)

    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    require_uppercase: bool | None = None
    require_lowercase: bool | None = None
    require_numbers: bool | None = None
    require_special_chars: bool | None = None
    custom_pattern: str | None = Field(
        default=None,
        description="Regex the sanitized value must fully match (free-text fields only).",
    )
    custom_pattern_message: str | None = None

    @field_validator("custom_pattern")
    @classmethod
    def _compiles(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                re.compile(v)
            except re.error as exc:
                raise ValueError(f"Invalid custom_pattern: {exc}") from exc
        return v

    def pick(self, name: str, default):
        value = getattr(self, name)
        return default if value is None else value


class RateLimitRecord(BaseModel):
    """Attempt counter for one rate-limit key."""

    count: int = Field(ge=1)
    last_attempt: int = Field(description="Epoch milliseconds of the latest attempt.")


class RateLimitDecision(BaseModel):
    allowed: bool
    retry_after_ms: int = Field(default=0, ge=0)


class SuspiciousInputReport(BaseModel):
    """Heuristic attack-signature scan of one raw value."""

    is_suspicious: bool = False
    reasons: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _suspicious_iff_reasons(self) -> SuspiciousInputReport:
        if self.is_suspicious != bool(self.reasons):
            raise ValueError("is_suspicious must be True exactly when reasons is non-empty")
        return self


class FormValidationOutcome(BaseModel):
    """Aggregated verdict for a whole form."""

    is_valid: bool
    sanitized_data: dict[str, str | int | None] = Field(default_factory=dict)
    errors: dict[str, list[str]] = Field(default_factory=dict)
    field_errors: dict[str, str] = Field(
        default_factory=dict,
        description="First error per failing field, for inline display.",
    )


class SignUpForm(BaseModel):
    name: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    email: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    password: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    confirm_password: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    phone: str = Field(default="", max_length=MAX_FIELD_LENGTH)


class SignInForm(BaseModel):
    email: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    password: str = Field(default="", max_length=MAX_FIELD_LENGTH)


class ReviewForm(BaseModel):
    doctor_name: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    doctor_specialization: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    clinic_name: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    doctor_location: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    rating: int = 0
    review_text: str = Field(default="", max_length=MAX_FIELD_LENGTH)


class DetectRequest(BaseModel):
    text: str = Field(..., max_length=MAX_FIELD_LENGTH)


class SubmissionVerdict(BaseModel):
    """Outbound result of guarding one form submission."""

    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    version: str = ""
    form: str
    accepted: bool
    rate_limited: bool = False
    retry_after_ms: int = 0
    suspicious: dict[str, SuspiciousInputReport] = Field(default_factory=dict)
    outcome: FormValidationOutcome | None = None
