"""In-memory TTL cache for reconciliation results."""

from __future__ import annotations

import time
from typing import Callable, Generic, Hashable, Optional, TypeVar

T = TypeVar("T")


class ResultCache(Generic[T]):
    """Keyed cache whose entries expire ``ttl_seconds`` after being stored.

    A TTL of zero or less disables caching. Expired entries are swept on
    every ``set`` so keys that are never read again do not accumulate.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def enabled(self) -> bool:
        return self._ttl_seconds > 0

    def get(self, key: Hashable) -> Optional[T]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        if self._is_expired(stored_at, self._clock()):
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: T) -> None:
        if not self.enabled:
            return
        now = self._clock()
        self._sweep(now)
        self._entries[key] = (now, value)

    def clear(self) -> None:
        self._entries.clear()

    def _sweep(self, now: float) -> None:
        expired = [key for key, (stored_at, _) in self._entries.items() if self._is_expired(stored_at, now)]
        for key in expired:
            del self._entries[key]

    def _is_expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self._ttl_seconds
