"""Tenant-scoped cache key schema.

Key format: Tenant:{tenant_id}:{cache_key}

The tenant id is a non-empty leading segment, so identical request keys
under different tenants never collide. Tenant ids must not contain the
separator; otherwise tenant "a:b" with key "c" and tenant "a" with key
"b:c" would share a key. Request keys may contain it. The literal format
is kept stable for compatibility with existing stores.
"""

from __future__ import annotations

from tenantguard.tenancy.models import TenantId


class TenantCacheKey:
    """Build and parse tenant-prefixed cache keys."""

    PREFIX = "Tenant"
    SEPARATOR = ":"

    @classmethod
    def _check_tenant(cls, tenant_id: TenantId) -> None:
        if not isinstance(tenant_id, TenantId):
            raise ValueError("Composite cache key requires a TenantId.")
        if cls.SEPARATOR in tenant_id.value:
            raise ValueError(
                f"Tenant id {tenant_id.value!r} cannot be used in a cache key: "
                f"it contains the separator {cls.SEPARATOR!r}."
            )

    @classmethod
    def build(cls, tenant_id: TenantId, cache_key: str) -> str:
        """Build the composite key for a tenant.

        Returns:
            Key like "Tenant:acme:invoice:42"

        Raises:
            ValueError: If tenant_id is not a TenantId or contains the separator
        """
        cls._check_tenant(tenant_id)
        return f"{cls.PREFIX}{cls.SEPARATOR}{tenant_id}{cls.SEPARATOR}{cache_key}"

    @classmethod
    def tenant_prefix(cls, tenant_id: TenantId) -> str:
        """Prefix shared by every key of one tenant."""
        cls._check_tenant(tenant_id)
        return f"{cls.PREFIX}{cls.SEPARATOR}{tenant_id}{cls.SEPARATOR}"

    @classmethod
    def parse(cls, key: str) -> tuple[TenantId, str] | None:
        """Split a composite key into tenant id and request key.

        The request key may itself contain separators; build() keeps
        them out of tenant ids.

        Returns None if the key doesn't match the expected format.
        """
        parts = key.split(cls.SEPARATOR, 2)
        if len(parts) != 3 or parts[0] != cls.PREFIX or not parts[1].strip():
            return None
        return TenantId(parts[1]), parts[2]
