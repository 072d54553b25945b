"""Redis cache store.

Values are stored as an orjson envelope so expiration hints travel with
the value:

    {"v": <value>, "s": <sliding seconds or null>, "d": <absolute deadline epoch or null>}

Pydantic model values add "t": "<module>:<qualname>" so a hit rebuilds the
same model class from its already imported module. Redis TTL enforces
whichever hint expires first. A hit on an entry with a sliding hint pushes
the TTL forward, never past the absolute deadline.
"""

from __future__ import annotations

import logging
import sys
import time
from datetime import timedelta
from typing import TYPE_CHECKING, Any, Callable

import orjson
import redis.asyncio as redis
from pydantic import BaseModel, ValidationError

from tenantguard.cache.base import CacheStore

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

# Exact types only: subclasses (enums, str subclasses) would decode as their base
_JSON_SCALARS = (str, int, float, bool)


def _check_json(value: Any) -> None:
    """Reject values that would not decode back to the same type."""
    if value is None or type(value) in _JSON_SCALARS:
        return
    if type(value) is list:
        for item in value:
            _check_json(item)
        return
    if type(value) is dict:
        for key, item in value.items():
            if type(key) is not str:
                raise TypeError(f"Cached dict keys must be str, got {type(key).__name__}")
            _check_json(item)
        return
    raise TypeError(f"Type is not cacheable: {type(value).__name__}")


def _model_path(model: type[BaseModel]) -> str:
    return f"{model.__module__}:{model.__qualname__}"


def _resolve_model(path: str) -> type[BaseModel] | None:
    """Find a model class by path among already imported modules.

    Cache contents never trigger imports.
    """
    module_name, _, qualname = path.partition(":")
    target: Any = sys.modules.get(module_name)
    for part in qualname.split("."):
        target = getattr(target, part, None)
        if target is None:
            return None
    if isinstance(target, type) and issubclass(target, BaseModel):
        return target
    return None


class RedisCacheStore(CacheStore):
    """Cache store over a redis-py async client.

    Cached values must be JSON-native (None, str, int, float, bool, and
    lists or str-keyed dicts of those) or a pydantic model defined at module
    level. Tuples, dataclasses, datetimes, UUIDs and other values that would
    decode as a different type raise TypeError on set().
    """

    def __init__(self, client: Redis, clock: Callable[[], float] = time.time):
        self.client = client
        self._clock = clock

    @classmethod
    def from_url(cls, url: str) -> RedisCacheStore:
        """Create a store with its own connection pool."""
        client = redis.from_url(  # type: ignore[no-untyped-call]
            url,
            decode_responses=False,
        )
        logger.info("Created Redis cache client")
        return cls(client)

    async def try_get(self, key: str, value_type: type = object) -> tuple[Any, bool]:
        raw = await self.client.get(key)
        if raw is None:
            return None, False

        try:
            envelope = orjson.loads(raw)
            value = envelope["v"]
            sliding = envelope.get("s")
            deadline = envelope.get("d")
            model_path = envelope.get("t")
            if model_path is not None and not isinstance(model_path, str):
                raise TypeError("model path must be a string")
        except (orjson.JSONDecodeError, KeyError, TypeError, AttributeError):
            logger.warning("Ignoring undecodable cache entry %s", key)
            return None, False

        remaining: float | None = None
        if deadline is not None:
            remaining = deadline - self._clock()
            if remaining <= 0:
                return None, False

        found, value = self._coerce(value, value_type, model_path)
        if not found:
            return None, False

        if sliding is not None:
            ttl = sliding if remaining is None else min(sliding, remaining)
            await self.client.pexpire(key, max(1, int(ttl * 1000)))

        return value, True

    @staticmethod
    def _coerce(value: Any, value_type: type, model_path: str | None) -> tuple[bool, Any]:
        if value is None:
            return True, None

        model: type[BaseModel] | None = None
        if isinstance(value_type, type) and issubclass(value_type, BaseModel):
            model = value_type
        elif model_path is not None:
            model = _resolve_model(model_path)
            if model is None:
                logger.warning("Cached model type %s is not loaded", model_path)
                return False, None

        if model is not None:
            try:
                value = model.model_validate(value)
            except ValidationError:
                return False, None

        if not isinstance(value, value_type):
            return False, None
        return True, value

    async def set(
        self,
        key: str,
        value: Any,
        absolute_expiration: timedelta | None = None,
        sliding_expiration: timedelta | None = None,
    ) -> None:
        absolute = absolute_expiration.total_seconds() if absolute_expiration else None
        sliding = sliding_expiration.total_seconds() if sliding_expiration else None

        envelope: dict[str, Any] = {
            "v": value,
            "s": sliding,
            "d": self._clock() + absolute if absolute is not None else None,
        }
        if isinstance(value, BaseModel):
            model = type(value)
            if _resolve_model(_model_path(model)) is not model:
                raise TypeError(
                    f"Cached model {model.__qualname__} must be reachable by module path"
                )
            envelope["v"] = value.model_dump(mode="json")
            envelope["t"] = _model_path(model)
        else:
            _check_json(value)
        payload = orjson.dumps(envelope)

        hints = [seconds for seconds in (absolute, sliding) if seconds is not None]
        if hints:
            await self.client.set(key, payload, px=max(1, int(min(hints) * 1000)))
        else:
            await self.client.set(key, payload)

    async def remove(self, key: str) -> None:
        await self.client.delete(key)

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("Closed Redis cache client")
