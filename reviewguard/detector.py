"""Suspicious-input detector: flags attack signatures in raw form values.

Runs on the value as typed, before sanitization strips the evidence. Each
pattern family is checked independently and every hit is reported.

This is a coarse heuristic: a semicolon or parenthesis in ordinary prose
trips the command-injection family. Callers decide what a hit means.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from reviewguard.models import SuspiciousInputReport

logger = logging.getLogger(__name__)

SQL_INJECTION_REASON = "Potential SQL injection detected"
XSS_REASON = "Potential XSS attempt detected"
PATH_TRAVERSAL_REASON = "Path traversal attempt detected"
COMMAND_INJECTION_REASON = "Potential command injection detected"

PatternFamily = tuple[str, str, re.Pattern[str]]

DEFAULT_FAMILIES: list[PatternFamily] = [
    (
        "sql_injection",
        SQL_INJECTION_REASON,
        re.compile(
            r"\b(?:union|select|insert|update|delete|drop|exec|execute)\b"
            r"|--"
            r"|/\*"
            r"|\*/",
            re.IGNORECASE,
        ),
    ),
    (
        "xss",
        XSS_REASON,
        re.compile(
            r"<script|javascript:|on\w+\s*=|<iframe|<object|<embed",
            re.IGNORECASE,
        ),
    ),
    (
        "path_traversal",
        PATH_TRAVERSAL_REASON,
        re.compile(
            r"\.\./|\.\.\\|%2e%2e%2f|%2e%2e%5c",
            re.IGNORECASE,
        ),
    ),
    (
        "command_injection",
        COMMAND_INJECTION_REASON,
        re.compile(r"[;&|`$(){}\[\]]"),
    ),
]


class SuspiciousInputDetector:
    """Match raw input against a table of attack-signature families."""

    name = "suspicious_input"

    def __init__(self, families: list[PatternFamily] | None = None) -> None:
        self._families = list(families) if families is not None else list(DEFAULT_FAMILIES)

    @property
    def families(self) -> list[str]:
        return [family for family, _, _ in self._families]

    def matched_families(self, raw: Any) -> list[str]:
        text = raw if isinstance(raw, str) else ""
        return [family for family, _, pattern in self._families if pattern.search(text)]

    def scan(self, raw: Any) -> SuspiciousInputReport:
        text = raw if isinstance(raw, str) else ""
        reasons = [reason for _, reason, pattern in self._families if pattern.search(text)]
        if reasons:
            logger.debug("Suspicious input: %d signature families matched", len(reasons))
        return SuspiciousInputReport(is_suspicious=bool(reasons), reasons=reasons)


_default_detector = SuspiciousInputDetector()


def detect_suspicious_input(raw: Any) -> SuspiciousInputReport:
    """Scan *raw* with the default signature families."""
    return _default_detector.scan(raw)
