"""Interceptor pipeline.

Composes interceptors around a request handler. The first interceptor in
the list runs first; the handler runs last:

    enforcement -> validation -> cache -> handler

Example:
    pipeline = build_pipeline(MemoryCacheStore(), tenant_context=tenants)

    with TenantScope(tenants, TenantId("acme")):
        invoice = await pipeline.send(GetInvoice(...), get_invoice, result_type=dict)
"""

from __future__ import annotations

import contextlib
import functools
from collections.abc import Sequence
from typing import Any, Awaitable, Callable, TypeVar

from tenantguard.cache.base import CacheStore
from tenantguard.cache.factory import get_cache_store
from tenantguard.observability.logging import LogContext
from tenantguard.pipeline.interceptors import (
    Interceptor,
    Invocation,
    Next,
    TenantCacheInterceptor,
    TenantEnforcementInterceptor,
    TenantValidationInterceptor,
)
from tenantguard.tenancy.context import CurrentTenant, TenantContext

T = TypeVar("T")
InterceptorT = TypeVar("InterceptorT", bound=Interceptor)

Handler = Callable[[Any], Awaitable[T]]


class TenantPipeline:
    """Runs requests through an ordered chain of interceptors.

    The pipeline holds no per-request state and may be shared by
    concurrent requests.
    """

    def __init__(
        self,
        interceptors: Sequence[Interceptor],
        tenant_context: TenantContext | None = None,
    ):
        """Initialize the pipeline.

        Args:
            interceptors: Interceptors in execution order
            tenant_context: Source of the active tenant when send() is not
                given one explicitly
        """
        self.interceptors = tuple(interceptors)
        self.tenant_context = tenant_context

    def find(self, interceptor_type: type[InterceptorT]) -> InterceptorT | None:
        """Return the first interceptor of a type, if present."""
        for interceptor in self.interceptors:
            if isinstance(interceptor, interceptor_type):
                return interceptor
        return None

    def _snapshot(self, tenant: CurrentTenant | None) -> CurrentTenant:
        if tenant is not None:
            return tenant
        if self.tenant_context is not None:
            return self.tenant_context.current()
        return CurrentTenant.none()

    async def send(
        self,
        request: Any,
        handler: Handler[T],
        *,
        tenant: CurrentTenant | None = None,
        result_type: type[T] | type = object,
    ) -> T:
        """Run a request through the interceptors and the handler.

        Args:
            request: The request
            handler: Async callable producing the result for the request
            tenant: Active tenant; read from the tenant context when omitted
            result_type: Type a cached value must have to be served from cache

        Returns:
            The handler's result, or a cached one

        Raises:
            TenantNotSetError: Tenant-required request without an active tenant
            TenantAccessError: Request bound to a different tenant
        """
        if request is None:
            raise ValueError("request must not be None")

        invocation = Invocation(
            request=request,
            tenant=self._snapshot(tenant),
            result_type=result_type,
        )

        call: Next[T] = functools.partial(handler, request)
        for interceptor in reversed(self.interceptors):
            call = functools.partial(interceptor, invocation, call)

        tenant_id = invocation.tenant.id
        if tenant_id is None:
            log_context: contextlib.AbstractContextManager[Any] = contextlib.nullcontext()
        else:
            log_context = LogContext(tenant_id=tenant_id.value)
        with log_context:
            return await call()


def build_pipeline(
    store: CacheStore | None = None,
    tenant_context: TenantContext | None = None,
) -> TenantPipeline:
    """Build the standard enforcement -> validation -> cache pipeline.

    Args:
        store: Cache store; defaults to the configured singleton store
        tenant_context: Source of the active tenant
    """
    return TenantPipeline(
        [
            TenantEnforcementInterceptor(),
            TenantValidationInterceptor(),
            TenantCacheInterceptor(store if store is not None else get_cache_store()),
        ],
        tenant_context=tenant_context,
    )
