"""Multi-tenancy primitives for tenantguard.

Provides the tenant model the pipeline works against:
- TenantId / TenantInfo: Tenant identity and metadata
- CurrentTenant / TenantContext: The active tenant for a request
- TenantScope / AsyncTenantScope: Bind a tenant for a block of work
- TenantDirectory: Tenant metadata lookup
- TenantNotSetError / TenantAccessError: Isolation failures

Example:
    from tenantguard.tenancy import ContextVarTenantContext, TenantId, TenantScope

    tenants = ContextVarTenantContext()

    with TenantScope(tenants, TenantId("acme")):
        assert tenants.current().has_tenant
"""

from tenantguard.tenancy.context import (
    AsyncTenantScope,
    ContextVarTenantContext,
    CurrentTenant,
    FixedTenantContext,
    TenantContext,
    TenantScope,
)
from tenantguard.tenancy.directory import InMemoryTenantDirectory, TenantDirectory
from tenantguard.tenancy.errors import TenantAccessError, TenantError, TenantNotSetError
from tenantguard.tenancy.models import TenantEntity, TenantId, TenantInfo, TenantOwned

__all__ = [
    # Models
    "TenantId",
    "TenantInfo",
    "TenantOwned",
    "TenantEntity",
    # Context
    "CurrentTenant",
    "TenantContext",
    "FixedTenantContext",
    "ContextVarTenantContext",
    "TenantScope",
    "AsyncTenantScope",
    # Directory
    "TenantDirectory",
    "InMemoryTenantDirectory",
    # Errors
    "TenantError",
    "TenantNotSetError",
    "TenantAccessError",
]
