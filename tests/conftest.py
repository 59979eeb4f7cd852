"""Shared fixtures for reviewguard tests."""

from __future__ import annotations

import pytest


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: int = 1_700_000_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("RG_API_KEY", raising=False)
    monkeypatch.delenv("RG_MAX_REQUEST_BODY_BYTES", raising=False)
    monkeypatch.delenv("RG_TRUSTED_CLIENT_KEY_HEADER", raising=False)
    monkeypatch.delenv("RG_WEAK_WORDS", raising=False)
