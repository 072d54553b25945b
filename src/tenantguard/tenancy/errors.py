"""Tenant pipeline errors."""

from __future__ import annotations

from tenantguard.tenancy.models import TenantId


class TenantError(Exception):
    """Base class for tenant isolation failures."""


class TenantNotSetError(TenantError):
    """Raised when a tenant-required operation runs without an active tenant."""

    default_message = "Tenant has not been set for the current context."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class TenantAccessError(TenantError):
    """Raised when an operation targets a tenant other than the active one.

    Attributes:
        expected_tenant_id: The active tenant
        actual_tenant_id: The tenant the operation declared
    """

    def __init__(
        self,
        expected_tenant_id: TenantId,
        actual_tenant_id: TenantId,
        message: str | None = None,
    ) -> None:
        self.expected_tenant_id = expected_tenant_id
        self.actual_tenant_id = actual_tenant_id
        super().__init__(
            message
            or f"Tenant mismatch. Expected '{expected_tenant_id}', actual '{actual_tenant_id}'."
        )
