"""Base cache store interface.

Defines the abstract key/value store the tenant cache interceptor writes
through. Implementations must be safe for concurrent use.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    """A stored value with its expiration hints."""

    value: Any
    absolute_expiration: timedelta | None = None
    sliding_expiration: timedelta | None = None


class CacheStore(ABC):
    """Abstract base class for cache store backends."""

    @abstractmethod
    async def try_get(self, key: str, value_type: type = object) -> tuple[Any, bool]:
        """Look up a value.

        Args:
            key: Cache key
            value_type: Type the stored value must have to count as a hit

        Returns:
            Tuple of (value, found). value is None when not found.
        """
        ...

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        absolute_expiration: timedelta | None = None,
        sliding_expiration: timedelta | None = None,
    ) -> None:
        """Store a value.

        Args:
            key: Cache key
            value: Value to store
            absolute_expiration: Lifetime from now; None for no absolute limit
            sliding_expiration: Lifetime since last read; None for no sliding limit
        """
        ...

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete a key if present."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        return None
