"""
SessionManager — the client's view of who is signed in.

State lives in two places that are always written together:

* durable storage (``TokenStorage``) under ``StorageKeys``, which survives restarts;
* three ``Signal`` objects (``user``, ``is_authenticated_signal``,
  ``loading``) for live UI binding.

Auth calls are not deduplicated.  When two run concurrently, each writes its
result as soon as its response arrives, so the last response to resolve wins.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Awaitable, Optional, Set

from client.errors import AuthClientError, AuthErrorKind, display_message
from client.models import AuthTokens, UserModel, now_ms
from client.repository import AuthRepository, AuthResult
from client.signals import Signal
from client.storage import StorageKeys, TokenStorage

logger = logging.getLogger(__name__)


class SessionManager:
    def __init__(self, repository: AuthRepository, storage: TokenStorage):
        self._repository = repository
        self._storage = storage
        self._background: Set[asyncio.Task] = set()

        self.user: Signal[Optional[UserModel]] = Signal(None)
        self.is_authenticated_signal: Signal[bool] = Signal(False)
        self.loading: Signal[bool] = Signal(False)

        self._restore()

    # ── Synchronous accessors ───────────────────────────────────────────

    def is_authenticated(self) -> bool:
        return self.is_authenticated_signal.value

    def get_current_user(self) -> Optional[UserModel]:
        return self.user.value

    def get_token(self) -> Optional[str]:
        return self._storage.get(StorageKeys.ACCESS_TOKEN)

    def is_token_expired(self) -> bool:
        expires_at = self._storage.get(StorageKeys.EXPIRES_AT)
        if not expires_at:
            return True
        try:
            return now_ms() >= int(expires_at)
        except ValueError:
            return True

    # ── Auth operations ─────────────────────────────────────────────────

    async def login(self, email: str, password: str) -> bool:
        email = (email or "").strip()
        return await self._authenticate(self._repository.login(email, password or ""))

    async def register(self, email: str, password: str, name: str) -> bool:
        email = (email or "").strip()
        return await self._authenticate(self._repository.register(email, password, name))

    async def login_with_google(self, credential: str, client_id: str) -> bool:
        return await self._authenticate(
            self._repository.login_with_google(credential, client_id)
        )

    async def refresh_token(self) -> bool:
        """Silent refresh; any failure clears the session and returns False."""
        refresh_token = self._storage.get(StorageKeys.REFRESH_TOKEN)
        if not refresh_token:
            self.clear_auth_state()
            return False

        try:
            result = await self._repository.refresh_token(refresh_token)
        except AuthClientError as exc:
            logger.warning("Refresh token failed: %s (%s)", exc.kind.value, exc.detail)
            self.clear_auth_state()
            return False

        self._handle_successful_auth(result)
        return True

    async def check_auth_status(self) -> bool:
        """
        Decide whether the stored session is still good.

        No token → signed out.  Expired → one silent refresh.  Otherwise the
        token is verified remotely, falling back to one refresh on failure.
        """
        token = self.get_token()
        if not token:
            self.clear_auth_state()
            return False

        if self.is_token_expired():
            return await self.refresh_token()

        try:
            user = await self._repository.verify_token()
        except AuthClientError as exc:
            logger.info("Token verification failed (%s); trying refresh", exc.kind.value)
            return await self.refresh_token()

        self.user.set(user)
        self.is_authenticated_signal.set(True)
        return True

    def logout(self) -> None:
        """
        Silent logout: local state is cleared at once and the server call runs
        in the background; its outcome is only logged.
        """
        token = self.get_token()
        self.clear_auth_state()
        if not token:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, skipping backend logout")
            return
        task = loop.create_task(self._backend_logout(token))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def logout_secure(self) -> None:
        """Await the server logout; local state is cleared whatever happens."""
        try:
            await self._repository.logout()
            logger.info("Logout acknowledged by backend")
        except AuthClientError as exc:
            if exc.kind is AuthErrorKind.UNAUTHORIZED:
                logger.info("Token already invalid, doing local logout")
            elif exc.kind in (AuthErrorKind.SERVER_ERROR, AuthErrorKind.NETWORK_ERROR):
                logger.warning("Backend unreachable (%s), forcing local logout", exc.kind.value)
            else:
                logger.warning("Unexpected logout error (%s), doing local logout", exc.kind.value)
        finally:
            self.clear_auth_state()

    def clear_auth_state(self) -> None:
        for key in StorageKeys.ALL:
            self._storage.remove(key)
        self.user.set(None)
        self.is_authenticated_signal.set(False)

    async def wait_background(self) -> None:
        """Wait for fire-and-forget calls (used on shutdown)."""
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    # ── Internals ───────────────────────────────────────────────────────

    async def _authenticate(self, call: Awaitable[AuthResult]) -> bool:
        self.loading.set(True)
        try:
            result = await call
        except AuthClientError as exc:
            logger.error("Auth failed: %s (%s)", exc.kind.value, exc.detail)
            raise AuthClientError(
                exc.kind,
                display_message(exc.kind),
                status_code=exc.status_code,
                detail=exc.detail,
            ) from exc
        finally:
            self.loading.set(False)

        self._handle_successful_auth(result)
        return True

    def _handle_successful_auth(self, result: AuthResult) -> None:
        tokens: AuthTokens = result.tokens
        self._storage.set(StorageKeys.ACCESS_TOKEN, tokens.access_token)
        if tokens.has_refresh_token():
            self._storage.set(StorageKeys.REFRESH_TOKEN, tokens.refresh_token)
        self._storage.set(StorageKeys.EXPIRES_AT, str(tokens.expires_at))
        self._storage.set(StorageKeys.USER_DATA, result.user.model_dump_json())

        self.user.set(result.user)
        self.is_authenticated_signal.set(True)

    async def _backend_logout(self, token: str) -> None:
        try:
            await self._repository.logout(token)
            logger.info("Backend logout successful")
        except AuthClientError as exc:
            logger.info("Backend logout failed (ignored): %s", exc.kind.value)

    def _restore(self) -> None:
        token = self.get_token()
        user_data = self._storage.get(StorageKeys.USER_DATA)
        if not (token and user_data):
            self.clear_auth_state()
            return
        try:
            user = UserModel.model_validate(json.loads(user_data))
        except ValueError as exc:
            logger.error("Stored user data is corrupt: %s", exc)
            self.clear_auth_state()
            return
        self.user.set(user)
        self.is_authenticated_signal.set(True)
        logger.info("Session restored for %s", user.email)
