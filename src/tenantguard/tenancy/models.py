"""Tenant value objects.

- TenantId: Opaque, non-empty tenant identifier
- TenantInfo: Minimal tenant metadata (id, name, connection string)
- TenantOwned / TenantEntity: Domain types that belong to one tenant
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class TenantId:
    """Strongly-typed tenant identifier.

    Wraps a non-empty string so raw identifiers do not leak through the
    pipeline. "No tenant" is represented by the absence of a TenantId,
    never by an empty value.

    Raises:
        ValueError: If value is not a string, or is empty or whitespace
    """

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not self.value.strip():
            raise ValueError("Tenant id cannot be empty or whitespace.")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class TenantInfo:
    """Tenant metadata known to the domain.

    Attributes:
        id: Tenant identifier
        name: Human-friendly tenant name
        connection_string: Optional connection string for a tenant-specific store
    """

    id: TenantId
    name: str
    connection_string: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.id, TenantId):
            raise ValueError("Tenant info requires a TenantId.")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Tenant name cannot be empty or whitespace.")


class TenantOwned(ABC):
    """A domain type that belongs to exactly one tenant."""

    @property
    @abstractmethod
    def owner_tenant_id(self) -> TenantId:
        """Tenant that owns this object."""


@dataclass(kw_only=True)
class TenantEntity(TenantOwned):
    """Optional base for tenant-scoped domain entities.

    Keyword-only so subclasses can add positional fields and compose
    with other dataclass bases.

    Example:
        @dataclass(kw_only=True)
        class Invoice(TenantEntity):
            number: str

        Invoice(tenant_id=TenantId("acme"), number="INV-1")
    """

    tenant_id: TenantId

    def __post_init__(self) -> None:
        if not isinstance(self.tenant_id, TenantId):
            raise ValueError("Tenant id must be specified.")

    @property
    def owner_tenant_id(self) -> TenantId:
        return self.tenant_id
