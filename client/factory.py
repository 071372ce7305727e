"""
Wires a complete auth client: storage, HTTP client with interceptor hooks,
repository, session manager and guards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx

from client.guards import AuthGuard, GuestGuard, RoleGuard
from client.interceptor import AuthInterceptor
from client.navigation import Navigator
from client.notifications import Notifier
from client.repository import AuthRepository
from client.session import SessionManager
from client.storage import FileTokenStorage, MemoryTokenStorage, TokenStorage
from config.settings import config


class NotifyingTransport(httpx.AsyncBaseTransport):
    """Wraps a transport so connection failures reach the interceptor before propagating."""

    def __init__(self, inner: httpx.AsyncBaseTransport, interceptor: AuthInterceptor):
        self._inner = inner
        self._interceptor = interceptor

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self._inner.handle_async_request(request)
        except httpx.TransportError as exc:
            self._interceptor.on_transport_error(request, exc)
            raise

    async def aclose(self) -> None:
        await self._inner.aclose()


@dataclass
class AuthClient:
    http: httpx.AsyncClient
    storage: TokenStorage
    navigator: Navigator
    notifier: Notifier
    interceptor: AuthInterceptor
    repository: AuthRepository
    session: SessionManager
    auth_guard: AuthGuard
    guest_guard: GuestGuard
    role_guard: RoleGuard

    async def aclose(self) -> None:
        await self.session.wait_background()
        await self.http.aclose()


def default_storage() -> TokenStorage:
    if config.token_storage_path:
        return FileTokenStorage(config.token_storage_path, config.token_encryption_key)
    return MemoryTokenStorage()


def create_auth_client(
    base_url: str | None = None,
    *,
    storage: Optional[TokenStorage] = None,
    navigator: Optional[Navigator] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    cooldown_seconds: float | None = None,
    timeout: float = 10.0,
) -> AuthClient:
    storage = storage if storage is not None else default_storage()
    navigator = navigator or Navigator()
    notifier = Notifier()
    interceptor = AuthInterceptor(
        storage, navigator, notifier, cooldown_seconds=cooldown_seconds
    )

    http = httpx.AsyncClient(
        base_url=base_url or config.api_base_url,
        transport=NotifyingTransport(transport or httpx.AsyncHTTPTransport(), interceptor),
        timeout=timeout,
        event_hooks=interceptor.event_hooks(),
    )
    repository = AuthRepository(http)
    session = SessionManager(repository, storage)
    interceptor.bind(session)

    return AuthClient(
        http=http,
        storage=storage,
        navigator=navigator,
        notifier=notifier,
        interceptor=interceptor,
        repository=repository,
        session=session,
        auth_guard=AuthGuard(session, navigator),
        guest_guard=GuestGuard(session, navigator),
        role_guard=RoleGuard(session, navigator),
    )
