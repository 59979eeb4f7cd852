"""Submission guard engine: rate-limits, scans and validates whole form submissions."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from typing import Any, Callable

from reviewguard import __version__
from reviewguard.config import Settings, get_settings
from reviewguard.detector import SuspiciousInputDetector
from reviewguard.forms import FormValidator
from reviewguard.models import (
    FormValidationOutcome,
    RateLimitDecision,
    SuspiciousInputReport,
    SubmissionVerdict,
)
from reviewguard.rate_limit import Clock, RateLimiter, build_rate_limiters
from reviewguard.sanitize import sanitize_email

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("reviewguard.audit")

OVERSIZED_REASON = "Input exceeds maximum length"

# Passwords are opaque; phone charset is enforced by its own sanitizer.
_UNSCANNED_FIELDS: frozenset[str] = frozenset({"password", "confirm_password", "phone"})


class GuardEngine:
    """Runs the rate limiter, the suspicious-input detector and the form
    validators, in that order, for one submission."""

    def __init__(
        self,
        settings: Settings | None = None,
        auth_limiter: RateLimiter | None = None,
        general_limiter: RateLimiter | None = None,
        detector: SuspiciousInputDetector | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        default_auth, default_general = build_rate_limiters(self._settings, clock=clock)
        self.auth_limiter = auth_limiter or default_auth
        self.general_limiter = general_limiter or default_general
        self.detector = detector or SuspiciousInputDetector()
        self.forms = FormValidator(config=self._settings_to_config())

    def _settings_to_config(self) -> dict[str, Any]:
        return self._settings.model_dump(exclude={"api_key"})

    @property
    def settings(self) -> Settings:
        return self._settings

    def guard_sign_up(
        self, fields: Mapping[str, Any], client_key: str, request_id: str | None = None,
    ) -> SubmissionVerdict:
        keys = _auth_keys(client_key, fields.get("email"))
        return self._guard("sign_up", fields, keys, self.auth_limiter,
                           self.forms.sign_up, request_id)

    def guard_sign_in(
        self, fields: Mapping[str, Any], client_key: str, request_id: str | None = None,
    ) -> SubmissionVerdict:
        keys = _auth_keys(client_key, fields.get("email"))
        return self._guard("sign_in", fields, keys, self.auth_limiter,
                           self.forms.sign_in, request_id)

    def guard_review(
        self, fields: Mapping[str, Any], client_key: str, request_id: str | None = None,
    ) -> SubmissionVerdict:
        return self._guard("review", fields, [_client_bucket(client_key)],
                           self.general_limiter, self.forms.review, request_id)

    def record_success(self, client_key: str, email: Any = None) -> None:
        """Clear the auth attempt counters after a successful sign-in.

        Pass the account email too, or its own counter keeps running.
        """
        for key in _auth_keys(client_key, email):
            self.auth_limiter.reset(key)

    def scan_fields(self, fields: Mapping[str, Any]) -> dict[str, SuspiciousInputReport]:
        """Scan raw string fields (not passwords or phone); only hits are returned."""
        max_len = self._settings.max_field_length
        hits: dict[str, SuspiciousInputReport] = {}
        for field, value in fields.items():
            if field in _UNSCANNED_FIELDS or not isinstance(value, str):
                continue
            if len(value) > max_len:
                hits[field] = SuspiciousInputReport(
                    is_suspicious=True, reasons=[OVERSIZED_REASON],
                )
                continue
            report = self.detector.scan(value)
            if report.is_suspicious:
                hits[field] = report
        return hits

    def _guard(
        self,
        form: str,
        fields: Mapping[str, Any],
        keys: list[str],
        limiter: RateLimiter,
        validate: Callable[[Mapping[str, Any]], FormValidationOutcome],
        request_id: str | None,
    ) -> SubmissionVerdict:
        rid = request_id or uuid.uuid4().hex

        decision = _check_all(limiter, keys)
        if not decision.allowed:
            audit_logger.warning(
                "RATE_LIMITED form=%s limiter=%s request_id=%s retry_after_ms=%d",
                form, limiter.name, rid, decision.retry_after_ms,
            )
            return SubmissionVerdict(
                request_id=rid,
                version=__version__,
                form=form,
                accepted=False,
                rate_limited=True,
                retry_after_ms=decision.retry_after_ms,
            )

        suspicious = self.scan_fields(fields)
        if suspicious:
            audit_logger.warning(
                "SUSPICIOUS_INPUT form=%s request_id=%s fields=%s",
                form, rid, sorted(suspicious),
            )
            return SubmissionVerdict(
                request_id=rid,
                version=__version__,
                form=form,
                accepted=False,
                suspicious=suspicious,
            )

        outcome = validate(fields)
        if not outcome.is_valid:
            logger.debug(
                "Form %s rejected, failing fields: %s", form, sorted(outcome.errors),
            )
        return SubmissionVerdict(
            request_id=rid,
            version=__version__,
            form=form,
            accepted=outcome.is_valid,
            outcome=outcome,
        )


def _client_bucket(client_key: str) -> str:
    return f"client:{client_key}"


def _auth_keys(client_key: str, email: Any) -> list[str]:
    # Sign-up and sign-in count per client and per target account.
    keys = [_client_bucket(client_key)]
    account = sanitize_email(email) if isinstance(email, str) else ""
    if account:
        keys.append(f"email:{account}")
    return keys


def _check_all(limiter: RateLimiter, keys: list[str]) -> RateLimitDecision:
    """Count the attempt against every key; denied if any key is over its limit."""
    decisions = [limiter.check(key) for key in keys]
    denied = [d for d in decisions if not d.allowed]
    if not denied:
        return decisions[0]
    return max(denied, key=lambda d: d.retry_after_ms)
