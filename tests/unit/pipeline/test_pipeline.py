"""Tests for pipeline composition."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any

import pytest

from tenantguard.cache import factory
from tenantguard.cache.base import CacheEntry
from tenantguard.cache.memory import MemoryCacheStore
from tenantguard.observability.logging import tenant_id_var
from tenantguard.pipeline.interceptors import (
    Interceptor,
    Invocation,
    Next,
    TenantCacheInterceptor,
    TenantEnforcementInterceptor,
    TenantValidationInterceptor,
)
from tenantguard.pipeline.pipeline import TenantPipeline, build_pipeline
from tenantguard.requests import Cacheable, CachePolicy, TenantRequest
from tenantguard.tenancy.context import (
    AsyncTenantScope,
    ContextVarTenantContext,
    CurrentTenant,
    FixedTenantContext,
)
from tenantguard.tenancy.errors import TenantAccessError, TenantNotSetError
from tenantguard.tenancy.models import TenantId


@dataclass(frozen=True, kw_only=True)
class GetReport(TenantRequest, Cacheable):
    report: str
    absolute_expiration_seconds: int | None = None
    sliding_expiration_seconds: int | None = None

    def cache_policy(self) -> CachePolicy:
        return CachePolicy(
            key=self.report,
            absolute_expiration_seconds=self.absolute_expiration_seconds,
            sliding_expiration_seconds=self.sliding_expiration_seconds,
        )


@dataclass(frozen=True)
class Ping:
    pass


class RecordingHandler:
    """Request handler that records the requests it saw."""

    def __init__(self, result: Any = "fresh-value") -> None:
        self.requests: list[Any] = []
        self.result = result

    async def __call__(self, request: Any) -> Any:
        self.requests.append(request)
        return self.result


class Tracer(Interceptor):
    """Interceptor that records entry and exit order."""

    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log

    async def __call__(self, invocation: Invocation, call_next: Next[Any]) -> Any:
        self.log.append(f"enter:{self.name}")
        result = await call_next()
        self.log.append(f"exit:{self.name}")
        return result


def report(tenant: str, name: str = "cache-key", **hints: int) -> GetReport:
    return GetReport(tenant_id=TenantId(tenant), report=name, **hints)


@pytest.fixture
def store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def tenants() -> ContextVarTenantContext:
    return ContextVarTenantContext()


@pytest.fixture
def pipeline(store: MemoryCacheStore, tenants: ContextVarTenantContext) -> TenantPipeline:
    return build_pipeline(store, tenant_context=tenants)


class TestTenantPipelineComposition:
    """Tests for interceptor ordering."""

    @pytest.mark.asyncio
    async def test_interceptors_run_in_order(self) -> None:
        """The first interceptor wraps all others; the handler runs last."""
        log: list[str] = []
        handler = RecordingHandler()
        pipeline = TenantPipeline([Tracer("a", log), Tracer("b", log)])

        await pipeline.send(Ping(), handler)

        assert log == ["enter:a", "enter:b", "exit:b", "exit:a"]
        assert handler.requests == [Ping()]

    @pytest.mark.asyncio
    async def test_empty_pipeline_calls_handler(self) -> None:
        """Without interceptors the handler result is returned directly."""
        result = await TenantPipeline([]).send(Ping(), RecordingHandler("pong"))

        assert result == "pong"

    def test_build_pipeline_order(self, pipeline: TenantPipeline) -> None:
        """The standard pipeline is enforcement, validation, cache."""
        assert [type(i) for i in pipeline.interceptors] == [
            TenantEnforcementInterceptor,
            TenantValidationInterceptor,
            TenantCacheInterceptor,
        ]

    def test_build_pipeline_uses_configured_store(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without an explicit store the configured singleton is used."""
        singleton = MemoryCacheStore()
        monkeypatch.setattr(factory, "_store", singleton)

        cache = build_pipeline().find(TenantCacheInterceptor)

        assert cache is not None
        assert cache.store is singleton

    def test_find_missing(self) -> None:
        """find returns None when no interceptor matches."""
        assert TenantPipeline([]).find(TenantCacheInterceptor) is None

    @pytest.mark.asyncio
    async def test_rejects_none_request(self, pipeline: TenantPipeline) -> None:
        """A None request is rejected."""
        with pytest.raises(ValueError):
            await pipeline.send(None, RecordingHandler())


class TestTenantPipelineBehavior:
    """End-to-end behavior of the standard pipeline."""

    @pytest.mark.asyncio
    async def test_tenant_required_without_tenant(
        self, pipeline: TenantPipeline, store: MemoryCacheStore
    ) -> None:
        """Enforcement rejects before validation or cache run."""
        handler = RecordingHandler()

        with pytest.raises(TenantNotSetError):
            await pipeline.send(report("tenant-1"), handler)

        assert handler.requests == []
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_unmarked_request_runs_without_tenant(self, pipeline: TenantPipeline) -> None:
        """Requests without capabilities always reach the handler."""
        handler = RecordingHandler("pong")

        assert await pipeline.send(Ping(), handler) == "pong"

    @pytest.mark.asyncio
    async def test_cross_tenant_request_rejected(
        self, pipeline: TenantPipeline, tenants: ContextVarTenantContext
    ) -> None:
        """Active tenant-a with a request for tenant-b fails."""
        handler = RecordingHandler()

        async with AsyncTenantScope(tenants, TenantId("tenant-a")):
            with pytest.raises(TenantAccessError) as exc:
                await pipeline.send(report("tenant-b"), handler)

        assert exc.value.expected_tenant_id == TenantId("tenant-a")
        assert exc.value.actual_tenant_id == TenantId("tenant-b")
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_miss_stores_with_hints(
        self,
        pipeline: TenantPipeline,
        tenants: ContextVarTenantContext,
        store: MemoryCacheStore,
    ) -> None:
        """A fresh result is stored under the composite key with its hints."""
        request = report(
            "tenant-1", absolute_expiration_seconds=60, sliding_expiration_seconds=30
        )

        async with AsyncTenantScope(tenants, TenantId("tenant-1")):
            result = await pipeline.send(request, RecordingHandler("fresh-value"))

        assert result == "fresh-value"
        assert store.peek("Tenant:tenant-1:cache-key") == CacheEntry(
            "fresh-value", timedelta(seconds=60), timedelta(seconds=30)
        )

    @pytest.mark.asyncio
    async def test_hit_skips_handler(
        self,
        pipeline: TenantPipeline,
        tenants: ContextVarTenantContext,
        store: MemoryCacheStore,
    ) -> None:
        """A pre-populated entry is served without running the handler."""
        await store.set("Tenant:tenant-1:key", "cached-value")
        handler = RecordingHandler()

        async with AsyncTenantScope(tenants, TenantId("tenant-1")):
            result = await pipeline.send(report("tenant-1", "key"), handler, result_type=str)

        assert result == "cached-value"
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_cache_hit_still_validated(
        self, pipeline: TenantPipeline, store: MemoryCacheStore
    ) -> None:
        """A cached entry is never served to a request bound to another tenant."""
        await store.set("Tenant:tenant-a:cache-key", "secret")

        with pytest.raises(TenantAccessError):
            await pipeline.send(
                report("tenant-b"),
                RecordingHandler(),
                tenant=CurrentTenant.of(TenantId("tenant-a")),
            )

    @pytest.mark.asyncio
    async def test_explicit_tenant_overrides_context(
        self, store: MemoryCacheStore, tenants: ContextVarTenantContext
    ) -> None:
        """A tenant passed to send() wins over the ambient context."""
        pipeline = build_pipeline(store, tenant_context=FixedTenantContext())

        result = await pipeline.send(
            report("tenant-1"), RecordingHandler(), tenant=CurrentTenant.of(TenantId("tenant-1"))
        )

        assert result == "fresh-value"
        assert store.peek("Tenant:tenant-1:cache-key") is not None

    @pytest.mark.asyncio
    async def test_binds_tenant_for_logging(self, tenants: ContextVarTenantContext) -> None:
        """The active tenant is bound to the log context during the request."""
        seen: list[str] = []

        async def handler(request: Any) -> str:
            seen.append(tenant_id_var.get())
            return "ok"

        pipeline = TenantPipeline([], tenant_context=tenants)
        async with AsyncTenantScope(tenants, TenantId("tenant-1")):
            await pipeline.send(Ping(), handler)

        assert seen == ["tenant-1"]
        assert tenant_id_var.get() == ""

    @pytest.mark.asyncio
    async def test_generic_result_type_served_from_cache(
        self, pipeline: TenantPipeline, tenants: ContextVarTenantContext
    ) -> None:
        """A parameterized result type still allows cache hits."""
        handler = RecordingHandler(["q1", "q2"])

        async with AsyncTenantScope(tenants, TenantId("tenant-1")):
            first = await pipeline.send(report("tenant-1"), handler, result_type=list[str])
            second = await pipeline.send(report("tenant-1"), handler, result_type=list[str])

        assert first == second == ["q1", "q2"]
        assert len(handler.requests) == 1
