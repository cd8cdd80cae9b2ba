"""
Tests for the authorization gate and the per-user permission cache.
"""
from types import SimpleNamespace

import pytest

from ecommerce_admin.auth.gate import (
    AuthorizationResult,
    Grants,
    Requirement,
    RequirementKind,
    authorize,
)
from ecommerce_admin.auth.permission_cache import PermissionCache


def principal(user_id=1, is_admin=False):
    return SimpleNamespace(id=user_id, is_admin=is_admin)


class RecordingLoader:
    """Grants loader that counts how often it was consulted."""

    def __init__(self, roles=(), permissions=()):
        self.grants = Grants.of(roles, permissions)
        self.calls = 0

    def __call__(self, _principal):
        self.calls += 1
        return self.grants


class TestRequirementParsing:
    """Normalisation of requirement strings and lists."""

    def test_pipe_and_comma_separated(self):
        assert Requirement.parse("view users|edit users").variants == ("view users", "edit users")
        assert Requirement.parse("view users, edit users").variants == ("view users", "edit users")

    def test_list_input_is_deduplicated_in_order(self):
        requirement = Requirement.parse(["b", "a|b", " c "], RequirementKind.ROLE)

        assert requirement.variants == ("b", "a", "c")
        assert requirement.kind is RequirementKind.ROLE

    def test_kind_accepts_string_value(self):
        assert Requirement.parse("Admin", "role").kind is RequirementKind.ROLE

    def test_empty_requirement_rejected(self):
        with pytest.raises(ValueError):
            Requirement.parse(" | , ")

    def test_str_joins_variants(self):
        assert str(Requirement.parse("a,b")) == "a|b"


class TestAuthorize:
    """Evaluation order: login, admin bypass, grants."""

    def test_missing_principal_requires_login(self):
        loader = RecordingLoader(permissions=["view users"])

        assert authorize(None, "view users", loader) is AuthorizationResult.REQUIRES_LOGIN
        assert loader.calls == 0

    def test_admin_bypasses_without_grants_lookup(self):
        loader = RecordingLoader()

        result = authorize(principal(is_admin=True), "delete everything", loader)

        assert result is AuthorizationResult.AUTHORIZED
        assert loader.calls == 0

    def test_any_variant_grants_access(self):
        loader = RecordingLoader(permissions=["edit users"])

        assert authorize(principal(), "view users|edit users", loader) is AuthorizationResult.AUTHORIZED

    def test_no_matching_variant_denies(self):
        loader = RecordingLoader(permissions=["view brands"])

        assert authorize(principal(), ["view users", "edit users"], loader) is AuthorizationResult.DENIED

    def test_role_kind_ignores_permissions(self):
        loader = RecordingLoader(roles=["Sales"], permissions=["Manager"])

        assert authorize(principal(), "Manager", loader, RequirementKind.ROLE) is AuthorizationResult.DENIED
        assert authorize(principal(), "Sales", loader, RequirementKind.ROLE) is AuthorizationResult.AUTHORIZED

    def test_role_or_permission_kind(self):
        loader = RecordingLoader(roles=["Support"])
        requirement = Requirement.parse("Manager|Support", RequirementKind.ROLE_OR_PERMISSION)

        assert authorize(principal(), requirement, loader) is AuthorizationResult.AUTHORIZED

    def test_invalid_requirement_raises_even_without_principal(self):
        with pytest.raises(ValueError):
            authorize(None, "")


class TestPermissionCache:
    """TTL-bound grants cache keyed by user id."""

    def make_cache(self, ttl=60):
        clock = SimpleNamespace(now=100.0)
        loader = RecordingLoader(permissions=["view users"])
        cache = PermissionCache(ttl=ttl, loader=loader, clock=lambda: clock.now)
        return cache, loader, clock

    def test_second_lookup_hits_cache(self):
        cache, loader, _ = self.make_cache()

        cache.get_grants(principal())
        grants = cache.get_grants(principal())

        assert "view users" in grants.permissions
        assert loader.calls == 1
        assert 1 in cache

    def test_entry_expires_after_ttl(self):
        cache, loader, clock = self.make_cache(ttl=60)

        cache.get_grants(principal())
        clock.now += 61
        cache.get_grants(principal())

        assert loader.calls == 2

    def test_invalidate_single_user(self):
        cache, loader, _ = self.make_cache()
        cache.get_grants(principal(1))
        cache.get_grants(principal(2))

        cache.invalidate(1)

        assert 1 not in cache
        assert 2 in cache
        cache.get_grants(principal(1))
        assert loader.calls == 3

    def test_clear(self):
        cache, _, _ = self.make_cache()
        cache.get_grants(principal(1))
        cache.get_grants(principal(2))

        cache.clear()

        assert len(cache) == 0

    def test_invalidate_unknown_user_is_noop(self):
        cache, _, _ = self.make_cache()

        cache.invalidate(42)

        assert len(cache) == 0
