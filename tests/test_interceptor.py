"""
Tests for AuthInterceptor, driven through a real httpx client with a mock
transport.
"""

import asyncio
from datetime import datetime, timezone

import httpx
import pytest

from client.factory import create_auth_client
from client.interceptor import InterceptorState
from client.models import UserModel, now_ms
from client.navigation import Navigator
from client.storage import MemoryTokenStorage, StorageKeys


def _envelope(data=None, message=None, success=True, error=None):
    body = {"success": success, "timestamp": datetime.now(timezone.utc).isoformat()}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    if error is not None:
        body["error"] = error
    return body


def _signed_in_storage():
    user = UserModel(id="u-1", email="a@x.com", name="Ann", roles=["user"])
    return MemoryTokenStorage(
        {
            StorageKeys.ACCESS_TOKEN: "at-0",
            StorageKeys.REFRESH_TOKEN: "rt-0",
            StorageKeys.EXPIRES_AT: str(now_ms() + 3_600_000),
            StorageKeys.USER_DATA: user.model_dump_json(),
        }
    )


class Backend:
    """Records requests and answers with a per-path status."""

    def __init__(self):
        self.requests = []
        self.statuses = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status = self.statuses.get(request.url.path, 200)
        if status >= 400:
            return httpx.Response(status, json=_envelope(success=False, message="nope", error="ERR"))
        return httpx.Response(200, json=_envelope(data={"ok": True}))

    def calls_to(self, path):
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def backend():
    return Backend()


@pytest.fixture
def navigator():
    return Navigator("/reports/42", login_path="/login", default_redirect="/dashboard")


def _client(backend, navigator, storage=None, cooldown=60.0):
    return create_auth_client(
        "http://test/api",
        storage=storage if storage is not None else _signed_in_storage(),
        navigator=navigator,
        transport=httpx.MockTransport(backend),
        cooldown_seconds=cooldown,
    )


class TestRequestHook:
    @pytest.mark.asyncio
    async def test_attaches_bearer_token(self, backend, navigator):
        client = _client(backend, navigator)
        await client.http.get("/reports")
        await client.aclose()

        assert backend.requests[0].headers["Authorization"] == "Bearer at-0"

    @pytest.mark.asyncio
    async def test_public_endpoints_get_no_token(self, backend, navigator):
        client = _client(backend, navigator)
        for path in ("/auth/login", "/auth/register", "/auth/google"):
            await client.http.post(path, json={})
        await client.aclose()

        for request in backend.requests:
            assert "Authorization" not in request.headers

    @pytest.mark.asyncio
    async def test_refresh_keeps_explicit_header(self, backend, navigator):
        client = _client(backend, navigator)
        await client.http.post("/auth/refresh", headers={"Authorization": "Bearer rt-0"})
        await client.http.get("/reports", headers={"Authorization": "Bearer other"})
        await client.aclose()

        assert backend.requests[0].headers["Authorization"] == "Bearer rt-0"
        assert backend.requests[1].headers["Authorization"] == "Bearer other"

    @pytest.mark.asyncio
    async def test_no_token_no_header(self, backend, navigator):
        client = _client(backend, navigator, storage=MemoryTokenStorage())
        await client.http.get("/reports")
        await client.aclose()

        assert "Authorization" not in backend.requests[0].headers


class TestUnauthorized:
    @pytest.mark.asyncio
    async def test_burst_of_401s_logs_out_once(self, backend, navigator):
        backend.statuses["/api/reports"] = 401
        client = _client(backend, navigator)

        responses = await asyncio.gather(*(client.http.get("/reports") for _ in range(3)))
        await client.session.wait_background()

        assert all(r.status_code == 401 for r in responses)
        assert client.interceptor.state is InterceptorState.HANDLING
        assert len(backend.calls_to("/api/auth/logout")) == 1
        assert not client.session.is_authenticated()
        assert navigator.current_url == "/login"
        assert navigator.redirect_url == "/reports/42"
        assert [n.summary for n in client.notifier.active] == ["Session expired"]
        await client.aclose()

    @pytest.mark.asyncio
    async def test_background_logout_carries_old_token(self, backend, navigator):
        backend.statuses["/api/reports"] = 401
        client = _client(backend, navigator)

        await client.http.get("/reports")
        await client.session.wait_background()

        (logout,) = backend.calls_to("/api/auth/logout")
        assert logout.headers["Authorization"] == "Bearer at-0"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_state_resets_after_cooldown(self, backend, navigator):
        backend.statuses["/api/reports"] = 401
        client = _client(backend, navigator, cooldown=0.01)

        await client.http.get("/reports")
        assert client.interceptor.state is InterceptorState.HANDLING
        await asyncio.sleep(0.05)
        assert client.interceptor.state is InterceptorState.IDLE
        await client.aclose()

    @pytest.mark.asyncio
    async def test_on_login_page_no_notification(self, backend):
        backend.statuses["/api/reports"] = 401
        navigator = Navigator("/login", login_path="/login")
        client = _client(backend, navigator)

        await client.http.get("/reports")
        await client.session.wait_background()

        assert client.notifier.active == []
        assert navigator.redirect_url is None
        await client.aclose()

    @pytest.mark.asyncio
    async def test_auth_endpoints_are_not_intercepted(self, backend, navigator):
        for path in ("/api/auth/login", "/api/auth/verify", "/api/auth/logout", "/api/auth/refresh"):
            backend.statuses[path] = 401
        client = _client(backend, navigator)

        await client.http.post("/auth/login", json={})
        await client.http.get("/auth/verify")
        await client.http.post("/auth/logout")
        await client.http.post("/auth/refresh")

        assert client.interceptor.state is InterceptorState.IDLE
        assert client.session.is_authenticated()
        assert navigator.current_url == "/reports/42"
        await client.aclose()


class TestNotifications:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, severity, summary",
        [
            (403, "error", "Access denied"),
            (404, "warn", "Resource not found"),
            (422, "warn", "Validation error"),
            (500, "error", "Server error"),
            (503, "error", "Server error"),
            (409, "error", "Unexpected error"),
        ],
    )
    async def test_error_statuses_notify(self, backend, navigator, status, severity, summary):
        backend.statuses["/api/reports"] = status
        client = _client(backend, navigator)

        response = await client.http.get("/reports")

        assert response.status_code == status
        (note,) = client.notifier.active
        assert (note.severity, note.summary) == (severity, summary)
        assert client.session.is_authenticated()
        await client.aclose()

    @pytest.mark.asyncio
    async def test_dismiss(self, backend, navigator):
        backend.statuses["/api/reports"] = 404
        client = _client(backend, navigator)

        await client.http.get("/reports")
        note = client.notifier.active[0]
        client.notifier.dismiss(note.id)

        assert client.notifier.active == []
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_failure_notifies_and_propagates(self, navigator):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(unreachable, navigator)

        with pytest.raises(httpx.ConnectError):
            await client.http.get("/reports")

        (note,) = client.notifier.active
        assert (note.severity, note.summary) == ("error", "Network error")
        assert client.session.is_authenticated()
        assert navigator.current_url == "/reports/42"
        await client.aclose()

    @pytest.mark.asyncio
    async def test_connection_failure_on_auth_endpoint_is_left_to_caller(self, navigator):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(unreachable, navigator)

        with pytest.raises(httpx.ConnectError):
            await client.http.post("/auth/login", json={})

        assert client.notifier.active == []
        await client.aclose()
