"""Tenant interceptors.

Each interceptor receives the invocation and a continuation. It either
raises, returns early, or awaits the continuation and returns its result:

- TenantEnforcementInterceptor: rejects tenant-required requests without a tenant
- TenantValidationInterceptor: rejects requests bound to another tenant
- TenantCacheInterceptor: serves and stores results per tenant

None of them catch errors raised further down the chain.
"""

from __future__ import annotations

import asyncio
import logging
import types
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar, get_origin

from tenantguard.cache.base import CacheStore
from tenantguard.cache.keys import TenantCacheKey
from tenantguard.requests import Cacheable, RequiresTenant, TenantBound
from tenantguard.tenancy.context import CurrentTenant
from tenantguard.tenancy.errors import TenantAccessError, TenantNotSetError
from tenantguard.tenancy.models import TenantId

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Continuation: runs the rest of the pipeline
Next = Callable[[], Awaitable[T]]


@dataclass(frozen=True)
class Invocation:
    """One pass of a request through the pipeline.

    Attributes:
        request: The request being handled
        tenant: Active tenant snapshot, taken once when the request entered
        result_type: Type a cached value must have to be served from cache;
            parameterized generics are reduced to their origin class
    """

    request: Any
    tenant: CurrentTenant
    result_type: type = object

    def __post_init__(self) -> None:
        # list[str] -> list; isinstance rejects parameterized generics
        origin = get_origin(self.result_type)
        if isinstance(origin, type) and origin is not types.UnionType:
            object.__setattr__(self, "result_type", origin)


def raise_if_cancelled() -> None:
    """Raise CancelledError if the running task has a pending cancellation.

    Task.cancelling() stays above zero when code in the task catches a
    CancelledError without calling Task.uncancel(). Every later request
    sent from that task is then rejected too; call uncancel() after
    suppressing a cancellation to keep using the task.
    """
    task = asyncio.current_task()
    if task is not None and task.cancelling():
        raise asyncio.CancelledError()


class Interceptor(ABC):
    """A pipeline stage wrapping the rest of the chain."""

    @abstractmethod
    async def __call__(self, invocation: Invocation, call_next: Next[T]) -> T:
        """Handle the invocation, usually by awaiting call_next()."""


class TenantEnforcementInterceptor(Interceptor):
    """Requests deriving from RequiresTenant must have an active tenant."""

    async def __call__(self, invocation: Invocation, call_next: Next[T]) -> T:
        raise_if_cancelled()

        if isinstance(invocation.request, RequiresTenant) and not invocation.tenant.has_tenant:
            raise TenantNotSetError()

        return await call_next()


class TenantValidationInterceptor(Interceptor):
    """A TenantBound request must target the active tenant.

    Without an active tenant, or when the request declares no target,
    there is nothing to compare and the request passes through.
    """

    async def __call__(self, invocation: Invocation, call_next: Next[T]) -> T:
        raise_if_cancelled()

        tenant = invocation.tenant
        request = invocation.request
        if tenant.id is not None and isinstance(request, TenantBound):
            target = request.target_tenant()
            if target is not None and target != tenant.id:
                raise TenantAccessError(expected_tenant_id=tenant.id, actual_tenant_id=target)

        return await call_next()


class TenantCacheInterceptor(Interceptor):
    """Serve Cacheable requests from a tenant-scoped cache.

    Results are stored under TenantCacheKey.build(active tenant, policy key)
    with the policy's expiration hints. Failed continuations store nothing.
    """

    def __init__(self, store: CacheStore):
        self.store = store

    async def __call__(self, invocation: Invocation, call_next: Next[T]) -> T:
        raise_if_cancelled()

        request = invocation.request
        if not isinstance(request, Cacheable):
            return await call_next()

        policy = request.cache_policy()
        tenant_id = invocation.tenant.id
        if policy.bypass or tenant_id is None:
            logger.debug(
                "Tenant cache skipped",
                extra={"reason": "bypass" if policy.bypass else "no_tenant"},
            )
            return await call_next()

        key = TenantCacheKey.build(tenant_id, policy.key)

        cached, found = await self.store.try_get(key, invocation.result_type)
        if found:
            logger.debug("Tenant cache hit", extra={"cache_key": key})
            return cached  # type: ignore[no-any-return]

        result = await call_next()

        await self.store.set(
            key,
            result,
            absolute_expiration=policy.absolute_expiration,
            sliding_expiration=policy.sliding_expiration,
        )
        logger.debug("Tenant cache miss, stored result", extra={"cache_key": key})
        return result

    async def invalidate(self, tenant_id: TenantId, cache_key: str) -> None:
        """Drop one tenant's cached result for a request key."""
        await self.store.remove(TenantCacheKey.build(tenant_id, cache_key))
