"""Active tenant for the current unit of work.

- CurrentTenant: Immutable snapshot read once per request
- TenantContext: Host-supplied source of the snapshot
- ContextVarTenantContext: Async-safe source backed by a ContextVar
- TenantScope / AsyncTenantScope: Bind a tenant for a block of work

Example:
    from tenantguard.tenancy.context import ContextVarTenantContext, TenantScope

    tenants = ContextVarTenantContext()

    with TenantScope(tenants, TenantId("acme-corp")):
        snapshot = tenants.current()  # CurrentTenant(id=TenantId("acme-corp"), ...)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import Any

from tenantguard.tenancy.models import TenantId, TenantInfo


@dataclass(frozen=True, slots=True)
class CurrentTenant:
    """Snapshot of the active tenant.

    Attributes:
        id: Active tenant, or None when no tenant is associated
        identifier: Human-readable or slug identifier
        name: Display name
    """

    id: TenantId | None = None
    identifier: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if self.id is None and (self.identifier is not None or self.name is not None):
            raise ValueError("Tenant identifier and name require a tenant id.")
        if self.id is not None and not isinstance(self.id, TenantId):
            raise ValueError("Current tenant id must be a TenantId.")

    @property
    def has_tenant(self) -> bool:
        return self.id is not None

    @classmethod
    def none(cls) -> CurrentTenant:
        """Snapshot with no active tenant."""
        return cls()

    @classmethod
    def of(
        cls,
        tenant_id: TenantId,
        identifier: str | None = None,
        name: str | None = None,
    ) -> CurrentTenant:
        """Snapshot for a tenant; identifier and name default to the id value."""
        return cls(
            id=tenant_id,
            identifier=identifier or tenant_id.value,
            name=name or tenant_id.value,
        )

    @classmethod
    def from_info(cls, info: TenantInfo) -> CurrentTenant:
        """Snapshot built from tenant metadata."""
        return cls(id=info.id, identifier=info.id.value, name=info.name)


class TenantContext(ABC):
    """Supplies the active tenant for the current execution context.

    Implementations are provided by the host (web request, background job).
    """

    @abstractmethod
    def current(self) -> CurrentTenant:
        """Return a snapshot of the active tenant."""


class FixedTenantContext(TenantContext):
    """Tenant context that always reports the same snapshot."""

    def __init__(self, tenant: CurrentTenant | None = None) -> None:
        self._tenant = tenant or CurrentTenant.none()

    def current(self) -> CurrentTenant:
        return self._tenant


class ContextVarTenantContext(TenantContext):
    """Tenant context backed by a ContextVar.

    Each asyncio task and thread sees its own binding, so concurrent
    requests never observe each other's tenant.
    """

    def __init__(self, name: str = "tenantguard_tenant") -> None:
        self._var: ContextVar[CurrentTenant | None] = ContextVar(name, default=None)

    def current(self) -> CurrentTenant:
        return self._var.get() or CurrentTenant.none()

    def bind(self, tenant: CurrentTenant) -> Token[CurrentTenant | None]:
        """Bind a tenant; pass the returned token to reset()."""
        return self._var.set(tenant)

    def reset(self, token: Token[CurrentTenant | None]) -> None:
        """Restore the binding that was active before bind()."""
        self._var.reset(token)


def _as_snapshot(tenant: TenantId | TenantInfo | CurrentTenant) -> CurrentTenant:
    if isinstance(tenant, CurrentTenant):
        return tenant
    if isinstance(tenant, TenantInfo):
        return CurrentTenant.from_info(tenant)
    if isinstance(tenant, TenantId):
        return CurrentTenant.of(tenant)
    raise TypeError(f"Cannot bind tenant from {type(tenant).__name__}")


class TenantScope:
    """Context manager for temporarily setting a tenant.

    Example:
        with TenantScope(tenants, TenantId("acme-corp")):
            # Pipelines reading `tenants` see acme-corp here
            result = await pipeline.send(request, handler)
    """

    def __init__(
        self,
        context: ContextVarTenantContext,
        tenant: TenantId | TenantInfo | CurrentTenant,
    ):
        """Initialize tenant scope.

        Args:
            context: Tenant context to bind
            tenant: Tenant id, metadata or snapshot to make active
        """
        self.context = context
        self.tenant = _as_snapshot(tenant)
        self._token: Token[CurrentTenant | None] | None = None

    def __enter__(self) -> CurrentTenant:
        """Enter the tenant scope."""
        self._token = self.context.bind(self.tenant)
        return self.tenant

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit the tenant scope and restore previous binding."""
        if self._token is not None:
            self.context.reset(self._token)
            self._token = None


class AsyncTenantScope(TenantScope):
    """Async context manager for temporarily setting a tenant.

    Example:
        async with AsyncTenantScope(tenants, TenantId("acme-corp")):
            result = await pipeline.send(request, handler)
    """

    async def __aenter__(self) -> CurrentTenant:
        return self.__enter__()

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.__exit__(exc_type, exc_val, exc_tb)
