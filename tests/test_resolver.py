"""Tests for the application identity cache."""
from __future__ import annotations

import pytest

from statsnozzle.errors import ResolutionFailed
from statsnozzle.resolver.cache import IdentityCache, ResolvedIdentity


class TestResolvedIdentity:
    def test_key_is_org_space_app(self) -> None:
        ident = ResolvedIdentity("web", "a1", "dev", "s1", "acme", "o1")
        assert ident.key == "acme/dev/web"

    def test_is_immutable(self) -> None:
        ident = ResolvedIdentity("web", "a1", "dev", "s1", "acme", "o1")
        with pytest.raises(AttributeError):
            ident.app_name = "other"  # type: ignore[misc]


class TestIdentityCache:
    def test_miss_calls_lookup_once(self, lookup) -> None:
        cache = IdentityCache(lookup)
        first = cache.resolve("a1")
        second = cache.resolve("a1")
        assert first is second
        assert lookup.calls == ["a1"]
        assert cache.lookups == 1

    def test_distinct_ids_each_looked_up(self, lookup) -> None:
        cache = IdentityCache(lookup)
        for app_id in ["a1", "a2", "a1", "a3", "a2"]:
            cache.resolve(app_id)
        assert lookup.calls == ["a1", "a2", "a3"]
        assert len(cache) == 3

    def test_failure_raises_resolution_failed(self, lookup_factory) -> None:
        cache = IdentityCache(lookup_factory(failing={"bad"}))
        with pytest.raises(ResolutionFailed) as excinfo:
            cache.resolve("bad")
        assert excinfo.value.app_id == "bad"
        assert isinstance(excinfo.value.reason, ConnectionError)

    def test_failure_not_cached(self, lookup_factory) -> None:
        lookup = lookup_factory(failing={"flaky"})
        cache = IdentityCache(lookup)
        with pytest.raises(ResolutionFailed):
            cache.resolve("flaky")
        assert "flaky" not in cache

        lookup.failing.clear()
        ident = cache.resolve("flaky")
        assert ident.app_id == "flaky"
        assert lookup.calls == ["flaky", "flaky"]
        assert "flaky" in cache

    def test_resolution_failed_from_lookup_passes_through(self) -> None:
        original = ResolutionFailed("x", "gone")

        def lookup(app_id: str) -> ResolvedIdentity:
            raise original

        with pytest.raises(ResolutionFailed) as excinfo:
            IdentityCache(lookup).resolve("x")
        assert excinfo.value is original

    def test_get_does_not_call_lookup(self, lookup) -> None:
        cache = IdentityCache(lookup)
        assert cache.get("a1") is None
        assert lookup.calls == []
