"""In-process cache store.

Thread-safe store with absolute and sliding expiration, bounded by an
optional least-recently-used limit. Suitable for single-instance hosts
and tests; use the Redis store when several instances share a cache.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable

from tenantguard.cache.base import CacheEntry, CacheStore

logger = logging.getLogger(__name__)


@dataclass
class _Slot:
    entry: CacheEntry
    stored_at: float
    last_access: float

    def is_expired(self, now: float) -> bool:
        absolute = self.entry.absolute_expiration
        if absolute is not None and now - self.stored_at >= absolute.total_seconds():
            return True
        sliding = self.entry.sliding_expiration
        if sliding is not None and now - self.last_access >= sliding.total_seconds():
            return True
        return False


class MemoryCacheStore(CacheStore):
    """Dictionary-backed cache store.

    Expired entries are dropped lazily on access. When max_entries is set,
    storing a new key past the limit evicts the least recently used one.
    """

    def __init__(
        self,
        max_entries: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive or None")
        self.max_entries = max_entries
        self._clock = clock
        self._slots: OrderedDict[str, _Slot] = OrderedDict()
        self._lock = threading.Lock()

    async def try_get(self, key: str, value_type: type = object) -> tuple[Any, bool]:
        with self._lock:
            slot = self._slots.get(key)
            if slot is None:
                return None, False

            now = self._clock()
            if slot.is_expired(now):
                del self._slots[key]
                return None, False

            value = slot.entry.value
            if value is not None and not isinstance(value, value_type):
                return None, False

            slot.last_access = now
            self._slots.move_to_end(key)
            return value, True

    async def set(
        self,
        key: str,
        value: Any,
        absolute_expiration: timedelta | None = None,
        sliding_expiration: timedelta | None = None,
    ) -> None:
        with self._lock:
            now = self._clock()
            self._slots[key] = _Slot(
                entry=CacheEntry(value, absolute_expiration, sliding_expiration),
                stored_at=now,
                last_access=now,
            )
            self._slots.move_to_end(key)

            if self.max_entries is not None:
                while len(self._slots) > self.max_entries:
                    evicted, _ = self._slots.popitem(last=False)
                    logger.debug("Evicted cache entry %s", evicted)

    async def remove(self, key: str) -> None:
        with self._lock:
            self._slots.pop(key, None)

    def peek(self, key: str) -> CacheEntry | None:
        """Return the stored entry without touching its access time or expiry."""
        with self._lock:
            slot = self._slots.get(key)
            return slot.entry if slot is not None else None

    def clear(self) -> None:
        with self._lock:
            self._slots.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    async def close(self) -> None:
        self.clear()
