"""Capabilities a request can opt into.

A request is any object passed through the pipeline. It opts into tenant
handling by deriving from one or more of:

- RequiresTenant: must not run without an active tenant
- TenantBound: declares the tenant it targets
- Cacheable: results may be cached per tenant

Capabilities are nominal base classes checked with isinstance, so they are
inherited by subclasses and survive attribute renames.

Example:
    @dataclass(frozen=True, kw_only=True)
    class GetInvoice(TenantRequest, Cacheable):
        invoice_id: str

        def cache_policy(self) -> CachePolicy:
            return CachePolicy(key=f"invoice:{self.invoice_id}", absolute_expiration_seconds=60)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta

from tenantguard.tenancy.models import TenantId


class RequiresTenant:
    """Marker: the request must not run without an active tenant."""

    __slots__ = ()


class TenantBound(ABC):
    """A request that declares which tenant it targets."""

    @abstractmethod
    def target_tenant(self) -> TenantId | None:
        """Tenant this request targets, or None when it declares none."""


@dataclass(frozen=True, slots=True)
class CachePolicy:
    """Caching hints for a request.

    Attributes:
        key: Request cache key, scoped to the tenant by the pipeline
        bypass: Skip the cache entirely for this request
        absolute_expiration_seconds: Lifetime from the moment of storing
        sliding_expiration_seconds: Lifetime since the last read
    """

    key: str
    bypass: bool = False
    absolute_expiration_seconds: int | None = None
    sliding_expiration_seconds: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise ValueError("Cache key cannot be empty.")
        for name in ("absolute_expiration_seconds", "sliding_expiration_seconds"):
            seconds = getattr(self, name)
            if seconds is not None and seconds <= 0:
                raise ValueError(f"{name} must be positive, got {seconds}")

    @property
    def absolute_expiration(self) -> timedelta | None:
        if self.absolute_expiration_seconds is None:
            return None
        return timedelta(seconds=self.absolute_expiration_seconds)

    @property
    def sliding_expiration(self) -> timedelta | None:
        if self.sliding_expiration_seconds is None:
            return None
        return timedelta(seconds=self.sliding_expiration_seconds)


class Cacheable(ABC):
    """A request whose result may be cached for the active tenant."""

    @abstractmethod
    def cache_policy(self) -> CachePolicy:
        """Caching hints for this request."""


@dataclass(frozen=True, kw_only=True)
class TenantRequest(RequiresTenant, TenantBound):
    """Base for requests that run inside, and target, a specific tenant."""

    tenant_id: TenantId

    def __post_init__(self) -> None:
        if not isinstance(self.tenant_id, TenantId):
            raise ValueError("Tenant id must be specified.")

    def target_tenant(self) -> TenantId | None:
        return self.tenant_id
