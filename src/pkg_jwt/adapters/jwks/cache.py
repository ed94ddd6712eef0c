from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Optional, Tuple

from ...domain.value_objects import VerificationKey

DEFAULT_CACHE_TTL_SECONDS = 300


@dataclass(frozen=True, slots=True)
class CachedKeySet:
    keys: Tuple[VerificationKey, ...]
    fetched_at: float


class KeySetCache:
    """
    Thread-safe holder for the last fetched key set.

    Expiry policy: an entry is fresh for `ttl_seconds` after it was stored.
    Expired entries are kept (see `peek`) so callers can fall back to them
    when a refresh fails; `invalidate` drops the entry entirely.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entry: Optional[CachedKeySet] = None
        self._lock = Lock()

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self) -> Optional[CachedKeySet]:
        """Return the entry only while it is fresh."""
        with self._lock:
            entry = self._entry
        if entry is None or self.age(entry) >= self._ttl:
            return None
        return entry

    def peek(self) -> Optional[CachedKeySet]:
        """Return the entry, fresh or not."""
        with self._lock:
            return self._entry

    def put(self, keys: Tuple[VerificationKey, ...]) -> CachedKeySet:
        entry = CachedKeySet(keys=tuple(keys), fetched_at=self._clock())
        with self._lock:
            self._entry = entry
        return entry

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None

    def age(self, entry: CachedKeySet) -> float:
        return self._clock() - entry.fetched_at
