"""Global pytest configuration and fixtures."""

from __future__ import annotations

import pytest

from tenantguard.cache import factory


@pytest.fixture(autouse=True)
def reset_cache_store(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test without a configured cache store singleton."""
    monkeypatch.setattr(factory, "_store", None)
