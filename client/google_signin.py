"""
Google Sign-In popup flow.

The popup hands back a credential asynchronously; if nothing arrives within
``google_signin_timeout_seconds`` the flow is abandoned and ``loading`` is
reset so the UI does not spin forever.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import Any, Awaitable, Dict

from client.errors import AuthClientError, AuthErrorKind
from client.session import SessionManager
from config.settings import config

logger = logging.getLogger(__name__)


def decode_google_credential(credential: str) -> Dict[str, Any]:
    """
    Decode the payload of a Google ID token *without* verifying it.

    Only for display; the server is the one that verifies.
    """
    try:
        payload = credential.split(".")[1]
        payload += "=" * (-len(payload) % 4)
        return json.loads(base64.urlsafe_b64decode(payload))
    except (IndexError, ValueError) as exc:
        raise AuthClientError(
            AuthErrorKind.GOOGLE_AUTH_ERROR, detail=f"Invalid Google credential token: {exc}"
        ) from exc


class GoogleSignInFlow:
    def __init__(
        self,
        session: SessionManager,
        client_id: str | None = None,
        *,
        timeout_seconds: float | None = None,
    ):
        self._session = session
        self._client_id = client_id or config.google_client_id
        self._timeout = (
            timeout_seconds if timeout_seconds is not None else config.google_signin_timeout_seconds
        )

    async def run(self, credential: Awaitable[str]) -> bool:
        """Wait for the popup's credential, then sign in with it."""
        self._session.loading.set(True)
        try:
            value = await asyncio.wait_for(credential, timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("Google sign-in timed out after %.0fs", self._timeout)
            self._session.loading.set(False)
            raise AuthClientError(
                AuthErrorKind.GOOGLE_AUTH_ERROR, detail="Google sign-in timed out"
            )

        if not value:
            self._session.loading.set(False)
            raise AuthClientError(AuthErrorKind.GOOGLE_AUTH_ERROR, detail="Empty Google credential")

        return await self._session.login_with_google(value, self._client_id)
