"""Tenant metadata lookup.

The directory answers "what do we know about this tenant" independently
of how the tenant was resolved for a request.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

from tenantguard.tenancy.models import TenantId, TenantInfo

logger = logging.getLogger(__name__)


class TenantDirectory(ABC):
    """Source of tenant metadata."""

    @abstractmethod
    def get_tenant_info(self, tenant: TenantId | str) -> TenantInfo | None:
        """Get metadata for a tenant id or a registered slug.

        Args:
            tenant: TenantId, or identifier string (id value or slug)

        Returns:
            TenantInfo when known, None otherwise
        """


class InMemoryTenantDirectory(TenantDirectory):
    """Thread-safe in-process tenant directory."""

    def __init__(self, tenants: list[TenantInfo] | None = None) -> None:
        self._by_id: dict[TenantId, TenantInfo] = {}
        self._by_slug: dict[str, TenantId] = {}
        self._lock = threading.Lock()
        for info in tenants or []:
            self.register(info)

    def register(self, info: TenantInfo, slug: str | None = None) -> None:
        """Add or replace a tenant, optionally reachable by slug."""
        if slug is not None and not slug.strip():
            raise ValueError("Tenant slug cannot be empty or whitespace.")
        with self._lock:
            self._by_id[info.id] = info
            if slug is not None:
                self._by_slug[slug] = info.id
        logger.debug("Registered tenant %s", info.id)

    def unregister(self, tenant_id: TenantId) -> None:
        """Remove a tenant and any slugs pointing at it."""
        with self._lock:
            self._by_id.pop(tenant_id, None)
            for slug in [s for s, tid in self._by_slug.items() if tid == tenant_id]:
                del self._by_slug[slug]

    def get_tenant_info(self, tenant: TenantId | str) -> TenantInfo | None:
        with self._lock:
            if isinstance(tenant, TenantId):
                return self._by_id.get(tenant)

            if not tenant or not tenant.strip():
                return None

            slug_target = self._by_slug.get(tenant)
            if slug_target is not None:
                return self._by_id.get(slug_target)
            return self._by_id.get(TenantId(tenant))

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)
