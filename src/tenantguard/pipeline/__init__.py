"""Tenant request pipeline.

Provides the interceptors that guard tenant-scoped requests and the
pipeline that chains them around a handler:
- TenantEnforcementInterceptor: Requires an active tenant
- TenantValidationInterceptor: Rejects cross-tenant requests
- TenantCacheInterceptor: Tenant-scoped result caching
- TenantPipeline / build_pipeline: Composition

Example:
    from tenantguard.pipeline import build_pipeline

    pipeline = build_pipeline(store, tenant_context=tenants)
    result = await pipeline.send(request, handler)
"""

from tenantguard.pipeline.interceptors import (
    Interceptor,
    Invocation,
    Next,
    TenantCacheInterceptor,
    TenantEnforcementInterceptor,
    TenantValidationInterceptor,
    raise_if_cancelled,
)
from tenantguard.pipeline.pipeline import Handler, TenantPipeline, build_pipeline

__all__ = [
    "Interceptor",
    "Invocation",
    "Next",
    "Handler",
    "TenantEnforcementInterceptor",
    "TenantValidationInterceptor",
    "TenantCacheInterceptor",
    "TenantPipeline",
    "build_pipeline",
    "raise_if_cancelled",
]
