"""
AuthRepository — HTTP calls to the auth API.

Unwraps the ``{success, data, message, error, timestamp}`` envelope and turns
every failure into an ``AuthClientError`` with a classified ``kind``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ValidationError

from client.errors import AuthClientError, AuthErrorKind, classify_status
from client.models import AuthTokens, UserModel

logger = logging.getLogger(__name__)


class AuthEndpoints:
    LOGIN = "/auth/login"
    REGISTER = "/auth/register"
    GOOGLE_AUTH = "/auth/google"
    REFRESH = "/auth/refresh"
    LOGOUT = "/auth/logout"
    VERIFY = "/auth/verify"
    ME = "/auth/me"


class AuthResult(BaseModel):
    user: UserModel
    tokens: AuthTokens
    message: Optional[str] = None


class AuthRepository:
    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def login(self, email: str, password: str) -> AuthResult:
        data = await self._call(
            "POST",
            AuthEndpoints.LOGIN,
            AuthErrorKind.INVALID_CREDENTIALS,
            json={"email": email, "password": password},
        )
        return self._parse(AuthResult, data)

    async def register(self, email: str, password: str, name: str) -> AuthResult:
        data = await self._call(
            "POST",
            AuthEndpoints.REGISTER,
            AuthErrorKind.VALIDATION_ERROR,
            json={"email": email, "password": password, "name": name},
        )
        return self._parse(AuthResult, data)

    async def login_with_google(self, credential: str, client_id: str) -> AuthResult:
        data = await self._call(
            "POST",
            AuthEndpoints.GOOGLE_AUTH,
            AuthErrorKind.GOOGLE_AUTH_ERROR,
            json={"credential": credential, "clientId": client_id},
        )
        return self._parse(AuthResult, data)

    async def refresh_token(self, refresh_token: str) -> AuthResult:
        # The refresh token travels explicitly; the interceptor leaves this endpoint alone.
        data = await self._call(
            "POST",
            AuthEndpoints.REFRESH,
            AuthErrorKind.TOKEN_EXPIRED,
            headers={"Authorization": f"Bearer {refresh_token}"},
        )
        return self._parse(AuthResult, data)

    async def logout(self, access_token: Optional[str] = None) -> None:
        """Revoke the server session; without ``access_token`` the interceptor supplies it."""
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else None
        await self._call(
            "POST",
            AuthEndpoints.LOGOUT,
            AuthErrorKind.SERVER_ERROR,
            headers=headers,
            require_data=False,
        )

    async def verify_token(self) -> UserModel:
        data = await self._call("GET", AuthEndpoints.VERIFY, AuthErrorKind.TOKEN_EXPIRED)
        return self._parse(UserModel, data)

    async def get_current_user(self) -> UserModel:
        data = await self._call("GET", AuthEndpoints.ME, AuthErrorKind.UNAUTHORIZED)
        return self._parse(UserModel, data)

    # ── Helpers ─────────────────────────────────────────────────────────

    async def _call(
        self,
        method: str,
        endpoint: str,
        default_kind: AuthErrorKind,
        *,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        require_data: bool = True,
    ) -> Any:
        try:
            response = await self._http.request(method, endpoint, json=json, headers=headers)
        except httpx.TransportError as exc:
            logger.error("Auth request %s %s failed: %s", method, endpoint, exc)
            raise AuthClientError(AuthErrorKind.NETWORK_ERROR, detail=str(exc)) from exc

        body = self._json(response)
        if response.is_error:
            kind = classify_status(response.status_code, default_kind)
            detail = body.get("message") if body else None
            logger.error(
                "Auth request %s %s -> %d (%s): %s",
                method,
                endpoint,
                response.status_code,
                kind.value,
                detail,
            )
            raise AuthClientError(kind, status_code=response.status_code, detail=detail)

        if not body.get("success") or (require_data and body.get("data") is None):
            detail = body.get("error") or body.get("message") or "Error in server response"
            raise AuthClientError(
                AuthErrorKind.UNEXPECTED_ERROR,
                status_code=response.status_code,
                detail=detail,
            )
        return body.get("data")

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _parse(model, data: Any):
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise AuthClientError(
                AuthErrorKind.UNEXPECTED_ERROR, detail=f"Malformed response: {exc}"
            ) from exc
