"""
AuthInterceptor — httpx event hooks around every API call.

Request hook: attaches ``Authorization: Bearer <access token>`` unless the
endpoint is public or the caller already supplied the header.

Response hook: a 401 from a non-auth endpoint starts one logout-and-redirect
sequence.  ``state`` moves ``IDLE → HANDLING`` and back to ``IDLE`` only when
the cool-down timer fires, so a burst of 401s produces a single logout.
Other error statuses post a dismissable notification, and so does a request
that gets no response at all (see ``NotifyingTransport`` in ``client.factory``).
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

import httpx

from client.navigation import Navigator
from client.notifications import Notifier
from client.repository import AuthEndpoints
from client.storage import StorageKeys, TokenStorage
from config.settings import config

if TYPE_CHECKING:
    from client.session import SessionManager

logger = logging.getLogger(__name__)

# No automatic bearer token; refresh carries its own.
PUBLIC_ENDPOINTS = (
    AuthEndpoints.LOGIN,
    AuthEndpoints.REGISTER,
    AuthEndpoints.GOOGLE_AUTH,
    AuthEndpoints.REFRESH,
)

# 401s here are reported to the caller, never turned into a forced logout.
AUTH_ENDPOINTS = PUBLIC_ENDPOINTS + (AuthEndpoints.LOGOUT, AuthEndpoints.VERIFY)

_STATUS_NOTIFICATIONS: Dict[int, tuple] = {
    403: ("error", "Access denied", "You do not have permission to access this resource"),
    404: ("warn", "Resource not found", "The requested resource does not exist"),
    422: ("warn", "Validation error", "Some of the submitted data is invalid"),
}


class InterceptorState(str, Enum):
    IDLE = "idle"
    HANDLING = "handling"


def _matches(path: str, endpoints: tuple) -> bool:
    return any(path.endswith(endpoint) for endpoint in endpoints)


class AuthInterceptor:
    def __init__(
        self,
        storage: TokenStorage,
        navigator: Navigator,
        notifier: Optional[Notifier] = None,
        *,
        cooldown_seconds: float | None = None,
    ):
        self._storage = storage
        self._navigator = navigator
        self._notifier = notifier or Notifier()
        self._session: Optional["SessionManager"] = None
        self._cooldown = (
            cooldown_seconds
            if cooldown_seconds is not None
            else config.unauthorized_cooldown_seconds
        )
        self._reset_handle: Optional[asyncio.TimerHandle] = None
        self.state = InterceptorState.IDLE

    def bind(self, session: "SessionManager") -> None:
        """Attach the session manager used for forced logout."""
        self._session = session

    def event_hooks(self) -> Dict[str, List]:
        return {"request": [self.on_request], "response": [self.on_response]}

    # ── Hooks ───────────────────────────────────────────────────────────

    async def on_request(self, request: httpx.Request) -> None:
        if _matches(request.url.path, PUBLIC_ENDPOINTS):
            return
        if "Authorization" in request.headers:
            return
        token = self._storage.get(StorageKeys.ACCESS_TOKEN)
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def on_response(self, response: httpx.Response) -> None:
        if not response.is_error:
            return
        path = response.request.url.path
        if _matches(path, AUTH_ENDPOINTS):
            logger.debug("Skipping interceptor for auth endpoint %s", path)
            return

        status = response.status_code
        if status == 401:
            self.handle_unauthorized()
        elif status in _STATUS_NOTIFICATIONS:
            self._notifier.add(*_STATUS_NOTIFICATIONS[status])
        elif status >= 500:
            self._notifier.add(
                "error", "Server error", "The server encountered an error. Try again later"
            )
        else:
            self._notifier.add("error", "Unexpected error", f"Request failed with status {status}")

    def on_transport_error(self, request: httpx.Request, exc: httpx.TransportError) -> None:
        """Called when a request got no response at all."""
        path = request.url.path
        if _matches(path, AUTH_ENDPOINTS):
            return
        logger.warning("%s %s failed: %s", request.method, path, exc)
        self._notifier.add(
            "error", "Network error", "Unable to reach the server. Check your connection"
        )

    # ── 401 handling ────────────────────────────────────────────────────

    def handle_unauthorized(self) -> None:
        if self.state is InterceptorState.HANDLING:
            logger.info("Already handling logout, skipping")
            return
        self.state = InterceptorState.HANDLING
        logger.info("Unauthorized request - clearing auth state")

        current_url = self._navigator.current_url
        on_login_page = current_url == self._navigator.login_path
        self._navigator.remember_redirect(current_url)

        if self._session is not None:
            self._session.logout()

        if not on_login_page:
            self._notifier.clear()
            self._notifier.add(
                "warn", "Session expired", "Your session has expired. Please sign in again"
            )

        self._navigator.navigate_to_login()
        self._reset_handle = asyncio.get_running_loop().call_later(self._cooldown, self.reset)

    def reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None
        self.state = InterceptorState.IDLE
