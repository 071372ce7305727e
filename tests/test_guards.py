"""
Tests for the route guards.
"""

from unittest.mock import AsyncMock

import pytest

from client.errors import AuthClientError, AuthErrorKind
from client.guards import AuthGuard, GuestGuard, RoleGuard
from client.models import UserModel, now_ms
from client.navigation import Navigator
from client.repository import AuthRepository
from client.session import SessionManager
from client.storage import MemoryTokenStorage, StorageKeys


def _storage_for(user=None, expires_at=None):
    if user is None:
        return MemoryTokenStorage()
    return MemoryTokenStorage(
        {
            StorageKeys.ACCESS_TOKEN: "at-0",
            StorageKeys.REFRESH_TOKEN: "rt-0",
            StorageKeys.EXPIRES_AT: str(expires_at or now_ms() + 3_600_000),
            StorageKeys.USER_DATA: user.model_dump_json(),
        }
    )


ANN = UserModel(id="u-1", email="a@x.com", name="Ann", roles=["user"])
ADMIN = UserModel(id="u-2", email="root@x.com", name="Root", roles=["user", "admin"])


@pytest.fixture
def repo():
    return AsyncMock(spec=AuthRepository)


@pytest.fixture
def navigator():
    return Navigator("/", login_path="/login", default_redirect="/dashboard")


class TestAuthGuard:
    @pytest.mark.asyncio
    async def test_authenticated_passes_without_network(self, repo, navigator):
        guard = AuthGuard(SessionManager(repo, _storage_for(ANN)), navigator)

        assert await guard.can_activate("/reports") is True
        repo.verify_token.assert_not_awaited()
        assert navigator.current_url == "/"

    @pytest.mark.asyncio
    async def test_anonymous_is_sent_to_login(self, repo, navigator):
        guard = AuthGuard(SessionManager(repo, _storage_for()), navigator)

        assert await guard.can_activate("/reports/7") is False
        assert navigator.current_url == "/login"
        assert navigator.pop_redirect() == "/reports/7"
        assert navigator.pop_redirect() == "/dashboard"

    @pytest.mark.asyncio
    async def test_child_and_lazy_routes(self, repo, navigator):
        guard = AuthGuard(SessionManager(repo, _storage_for()), navigator)

        assert await guard.can_activate_child("/settings/profile") is False
        assert navigator.redirect_url == "/settings/profile"

        assert await guard.can_load(["admin", "users"]) is False
        assert navigator.redirect_url == "/admin/users"

    @pytest.mark.asyncio
    async def test_check_error_denies(self, repo, navigator):
        session = SessionManager(repo, _storage_for())
        session.check_auth_status = AsyncMock(side_effect=AuthClientError(AuthErrorKind.NETWORK_ERROR))
        guard = AuthGuard(session, navigator)

        assert await guard.can_activate("/reports") is False
        assert navigator.current_url == "/login"


class TestGuestGuard:
    def test_guest_may_open_login(self, repo, navigator):
        guard = GuestGuard(SessionManager(repo, _storage_for()), navigator)
        assert guard.can_activate() is True
        assert navigator.current_url == "/"

    def test_signed_in_user_is_redirected(self, repo, navigator):
        navigator.remember_redirect("/reports/7")
        guard = GuestGuard(SessionManager(repo, _storage_for(ANN)), navigator)

        assert guard.can_activate() is False
        assert navigator.current_url == "/reports/7"
        assert navigator.redirect_url is None

    def test_default_redirect(self, repo, navigator):
        guard = GuestGuard(SessionManager(repo, _storage_for(ANN)), navigator)
        assert guard.can_activate() is False
        assert navigator.current_url == "/dashboard"


class TestRoleGuard:
    def test_no_roles_required(self, repo, navigator):
        guard = RoleGuard(SessionManager(repo, _storage_for()), navigator)
        assert guard.can_activate() is True

    def test_any_of_required_roles(self, repo, navigator):
        guard = RoleGuard(SessionManager(repo, _storage_for(ADMIN)), navigator)
        assert guard.can_activate(["admin"]) is True
        assert guard.can_activate(["auditor", "admin"]) is True
        assert guard.can_activate(["auditor"]) is False
        assert navigator.current_url == "/"

    def test_anonymous_goes_to_login(self, repo, navigator):
        guard = RoleGuard(SessionManager(repo, _storage_for()), navigator)
        assert guard.can_activate(["user"]) is False
        assert navigator.current_url == "/login"
