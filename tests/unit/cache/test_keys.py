"""Tests for tenant cache key generation."""

import pytest

from tenantguard.cache.keys import TenantCacheKey
from tenantguard.tenancy.models import TenantId


class TestTenantCacheKey:
    """Test tenant cache key generation."""

    def test_build(self) -> None:
        """Composite key has the Tenant:<id>:<key> format."""
        key = TenantCacheKey.build(TenantId("tenant-1"), "cache-key")

        assert key == "Tenant:tenant-1:cache-key"

    def test_build_keeps_separators_in_request_key(self) -> None:
        """Request keys may contain separators."""
        key = TenantCacheKey.build(TenantId("acme"), "invoice:42:lines")

        assert key == "Tenant:acme:invoice:42:lines"

    def test_same_request_key_differs_per_tenant(self) -> None:
        """The tenant segment isolates identical request keys."""
        first = TenantCacheKey.build(TenantId("acme"), "k")
        second = TenantCacheKey.build(TenantId("beta"), "k")

        assert first != second

    def test_build_requires_tenant_id(self) -> None:
        """Raw strings are not accepted as tenants."""
        with pytest.raises(ValueError):
            TenantCacheKey.build("acme", "k")  # type: ignore[arg-type]

    def test_build_rejects_separator_in_tenant_id(self) -> None:
        """Tenant ids containing the separator would alias other tenants' keys."""
        with pytest.raises(ValueError, match="separator"):
            TenantCacheKey.build(TenantId("a:b"), "c")

        assert TenantCacheKey.build(TenantId("a"), "b:c") == "Tenant:a:b:c"

    def test_tenant_prefix_rejects_separator_in_tenant_id(self) -> None:
        """Prefixes are refused for the same tenant ids."""
        with pytest.raises(ValueError, match="separator"):
            TenantCacheKey.tenant_prefix(TenantId("a:b"))

    def test_tenant_prefix(self) -> None:
        """Every key of a tenant starts with its prefix."""
        prefix = TenantCacheKey.tenant_prefix(TenantId("acme"))

        assert prefix == "Tenant:acme:"
        assert TenantCacheKey.build(TenantId("acme"), "k").startswith(prefix)

    def test_parse(self) -> None:
        """parse splits tenant and request key."""
        parsed = TenantCacheKey.parse("Tenant:acme:invoice:42")

        assert parsed == (TenantId("acme"), "invoice:42")

    @pytest.mark.parametrize("key", ["orders:acme:bytes", "Tenant:acme", "Tenant: :k", ""])
    def test_parse_invalid(self, key: str) -> None:
        """parse returns None for foreign keys."""
        assert TenantCacheKey.parse(key) is None
