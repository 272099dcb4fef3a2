"""Tests for caller resolution and the authorization rule."""
import pytest

from learning_dashboard.core.config import Settings
from learning_dashboard.core.errors import AuthorizationDenied
from learning_dashboard.services.access import (
    ANONYMOUS,
    Principal,
    authorize,
    resolve_access,
    resolve_caller,
    resolve_target_name,
)


class TestResolveTargetName:
    def test_target_wins(self):
        assert resolve_target_name("Ann", "Ben", Settings()) == ("Ben", False)

    def test_falls_back_to_caller(self):
        assert resolve_target_name("Ann", None, Settings()) == ("Ann", False)

    def test_falls_back_to_demo_user(self):
        settings = Settings(demo_user_name="demo")
        assert resolve_target_name(None, None, settings) == ("demo", True)

    def test_blank_values_are_absent(self):
        settings = Settings(demo_user_name="demo")
        assert resolve_target_name("  ", "", settings) == ("demo", True)


class TestAuthorize:
    @pytest.mark.parametrize("target", ["Ben", "ann2", "Admin"])
    def test_non_admin_other_target_denied(self, target):
        with pytest.raises(AuthorizationDenied):
            authorize(Principal(name="Ann"), target)

    @pytest.mark.parametrize("target", ["Ann", "ann", "ANN"])
    def test_non_admin_own_data_any_case(self, target):
        authorize(Principal(name="Ann"), target)

    @pytest.mark.parametrize("target", ["Ann", "Ben", "nobody"])
    def test_admin_any_target(self, target):
        authorize(Principal(name="Root", is_admin=True), target)

    def test_anonymous_is_not_checked(self):
        assert ANONYMOUS.is_anonymous
        authorize(ANONYMOUS, "Ben")


class TestResolveCaller:
    @pytest.mark.asyncio
    async def test_admin_role(self, seeded, session_factory, settings):
        async with session_factory() as db:
            principal = await resolve_caller(db, "admin", settings)
        assert principal == Principal(name="admin", is_admin=True)

    @pytest.mark.asyncio
    async def test_plain_user(self, seeded, session_factory, settings):
        async with session_factory() as db:
            principal = await resolve_caller(db, "Alice", settings)
        assert principal.is_admin is False

    @pytest.mark.asyncio
    async def test_unknown_caller_is_plain(self, seeded, session_factory, settings):
        async with session_factory() as db:
            principal = await resolve_caller(db, "Mallory", settings)
        assert principal.is_admin is False
        assert principal.name == "Mallory"

    @pytest.mark.asyncio
    async def test_no_caller_is_anonymous(self, seeded, session_factory, settings):
        async with session_factory() as db:
            assert await resolve_caller(db, None, settings) is ANONYMOUS

    @pytest.mark.asyncio
    async def test_custom_admin_role(self, seeded, session_factory, settings):
        settings = settings.model_copy(update={"admin_role": "user"})
        async with session_factory() as db:
            principal = await resolve_caller(db, "Alice", settings)
        assert principal.is_admin is True


class TestResolveAccess:
    @pytest.mark.asyncio
    async def test_denied(self, seeded, session_factory, settings):
        async with session_factory() as db:
            with pytest.raises(AuthorizationDenied):
                await resolve_access(db, "Alice", "Bob", settings)

    @pytest.mark.asyncio
    async def test_admin_decision(self, seeded, session_factory, settings):
        async with session_factory() as db:
            decision = await resolve_access(db, "Admin", "bob", settings)
        assert decision.target_name == "bob"
        assert decision.principal.is_admin
        assert decision.used_demo_target is False
