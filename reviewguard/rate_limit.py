"""Sliding-window attempt limiter for form submissions.

The window is anchored to the most recent attempt, not to a fixed origin:
attempts spaced more than ``window_ms`` apart never accumulate, while a burst
inside the window does.

Records live in a pluggable store. ``InMemoryStore`` keeps every key for the
process lifetime, which is fine for a bounded key space. Use
``ExpiringStore`` when keys are caller-influenced.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Protocol

from reviewguard.config import Settings
from reviewguard.models import RateLimitDecision, RateLimitRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def system_clock_ms() -> int:
    return int(time.time() * 1000)


class RateLimitStore(Protocol):
    """Capability the limiter needs from its backing storage."""

    def get(self, key: str) -> RateLimitRecord | None: ...

    def set(self, key: str, record: RateLimitRecord) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryStore:
    """Plain dict store. Entries are only replaced or explicitly deleted."""

    def __init__(self) -> None:
        self._records: dict[str, RateLimitRecord] = {}

    def get(self, key: str) -> RateLimitRecord | None:
        return self._records.get(key)

    def set(self, key: str, record: RateLimitRecord) -> None:
        self._records[key] = record

    def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def __len__(self) -> int:
        return len(self._records)


class ExpiringStore:
    """Bounded store: entries expire ``ttl_ms`` after their last write and the
    least recently written key is evicted once ``max_keys`` is reached."""

    def __init__(self, max_keys: int, ttl_ms: int, clock: Clock | None = None) -> None:
        if max_keys < 1:
            raise ValueError("max_keys must be >= 1")
        self.max_keys = max_keys
        self.ttl_ms = ttl_ms
        self._clock = clock or system_clock_ms
        self._records: OrderedDict[str, tuple[int, RateLimitRecord]] = OrderedDict()

    def _purge(self, now: int) -> None:
        while self._records:
            key, (expires_at, _) = next(iter(self._records.items()))
            if expires_at >= now:
                break
            del self._records[key]

    def get(self, key: str) -> RateLimitRecord | None:
        now = self._clock()
        entry = self._records.get(key)
        if entry is None:
            return None
        expires_at, record = entry
        if expires_at < now:
            del self._records[key]
            return None
        return record

    def set(self, key: str, record: RateLimitRecord) -> None:
        now = self._clock()
        self._purge(now)
        self._records.pop(key, None)
        while len(self._records) >= self.max_keys:
            self._records.popitem(last=False)
            logger.debug("Evicted rate-limit key to stay under %d entries", self.max_keys)
        self._records[key] = (now + self.ttl_ms, record)

    def delete(self, key: str) -> None:
        self._records.pop(key, None)

    def __len__(self) -> int:
        return len(self._records)


class RateLimiter:
    """Count attempts per key inside a window that slides with each attempt."""

    def __init__(
        self,
        max_attempts: int = 5,
        window_ms: int = 15 * 60 * 1000,
        store: RateLimitStore | None = None,
        clock: Clock | None = None,
        name: str = "default",
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")
        self.max_attempts = max_attempts
        self.window_ms = window_ms
        self.name = name
        self._store: RateLimitStore = store if store is not None else InMemoryStore()
        self._clock: Clock = clock or system_clock_ms
        self._lock = threading.Lock()

    def is_allowed(self, key: str) -> bool:
        """Record an attempt for *key* and report whether it is within the limit."""
        with self._lock:
            now = self._clock()
            record = self._store.get(key)

            if record is None or now - record.last_attempt > self.window_ms:
                self._store.set(key, RateLimitRecord(count=1, last_attempt=now))
                return True

            record = RateLimitRecord(count=record.count + 1, last_attempt=now)
            self._store.set(key, record)
            allowed = record.count <= self.max_attempts

        if not allowed:
            logger.info(
                "Rate limit '%s' exceeded (%d attempts, limit %d)",
                self.name, record.count, self.max_attempts,
            )
        return allowed

    def get_remaining_time(self, key: str) -> int:
        """Milliseconds until *key*'s window lapses; 0 if it has no record."""
        with self._lock:
            record = self._store.get(key)
            if record is None:
                return 0
            elapsed = self._clock() - record.last_attempt
        return max(0, self.window_ms - elapsed)

    def reset(self, key: str) -> None:
        with self._lock:
            self._store.delete(key)

    def check(self, key: str) -> RateLimitDecision:
        """``is_allowed`` plus the back-off to report when denied."""
        if self.is_allowed(key):
            return RateLimitDecision(allowed=True)
        return RateLimitDecision(allowed=False, retry_after_ms=self.get_remaining_time(key))

    def __repr__(self) -> str:
        return f"<RateLimiter {self.name} {self.max_attempts}/{self.window_ms}ms>"


def _build_store(settings: Settings, window_ms: int, clock: Clock | None) -> RateLimitStore:
    if settings.rate_limit_store == "ttl":
        return ExpiringStore(settings.rate_limit_max_keys, window_ms, clock=clock)
    return InMemoryStore()


def build_rate_limiters(
    settings: Settings, clock: Clock | None = None,
) -> tuple[RateLimiter, RateLimiter]:
    """Return fresh ``(auth, general)`` limiters configured from *settings*."""
    auth = RateLimiter(
        settings.auth_max_attempts,
        settings.auth_window_ms,
        store=_build_store(settings, settings.auth_window_ms, clock),
        clock=clock,
        name="auth",
    )
    general = RateLimiter(
        settings.general_max_attempts,
        settings.general_window_ms,
        store=_build_store(settings, settings.general_window_ms, clock),
        clock=clock,
        name="general",
    )
    return auth, general
