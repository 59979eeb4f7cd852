"""Secure password suggestions for the sign-up form."""

from __future__ import annotations

import random
import secrets
import string

from reviewguard.validators.passwords import PasswordValidator

SUGGESTION_LENGTH = 12

UPPERCASE = string.ascii_uppercase
LOWERCASE = string.ascii_lowercase
DIGITS = string.digits
SPECIALS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
ALL_CHARS = UPPERCASE + LOWERCASE + DIGITS + SPECIALS

def _candidate(rng: random.Random) -> str:
    chars = [rng.choice(pool) for pool in (UPPERCASE, LOWERCASE, DIGITS, SPECIALS)]
    chars.extend(rng.choice(ALL_CHARS) for _ in range(SUGGESTION_LENGTH - len(chars)))
    rng.shuffle(chars)
    return "".join(chars)


def generate_password_suggestions(
    count: int = 3,
    rng: random.Random | None = None,
    validator: PasswordValidator | None = None,
) -> list[str]:
    """Return *count* 12-character passwords covering all four character classes.

    One character is drawn from each class, eight more from the union, and the
    result is shuffled. Candidates that hit a weak pattern of *validator*
    (the default policy when omitted) are drawn again, so callers should pass
    the validator their sign-up form uses. The default source is
    ``secrets.SystemRandom``; pass a seeded ``random.Random`` for reproducible
    output.
    """
    rng = rng or secrets.SystemRandom()
    validator = validator or PasswordValidator()
    suggestions: list[str] = []
    while len(suggestions) < count:
        candidate = _candidate(rng)
        if validator.weak_pattern(candidate) is None:
            suggestions.append(candidate)
    return suggestions
