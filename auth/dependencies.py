"""
FastAPI dependencies for authentication.

Provides ``db_session``, ``get_auth_service``, ``get_bearer_token`` and
``get_current_user_id`` dependencies that are used across the auth routes.
"""

from __future__ import annotations

from typing import AsyncGenerator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.exceptions import UnauthorizedError
from auth.google import GoogleTokenVerifier
from auth.jwt import ACCESS_TOKEN, InvalidTokenError, TokenIssuer
from auth.service import AuthService
from config.settings import config
from database.session import get_db_session
from database.user_store import UserStore

_bearer_scheme = HTTPBearer(auto_error=False)

token_issuer = TokenIssuer()
google_verifier = GoogleTokenVerifier()


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_token_issuer() -> TokenIssuer:
    return token_issuer


async def get_auth_service(
    session: AsyncSession = Depends(db_session),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(
        UserStore(session),
        issuer,
        google_verifier,
        google_client_id=config.google_client_id,
        bcrypt_rounds=config.bcrypt_rounds,
    )


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> str:
    """Return the raw Bearer token; 401 when the header is missing."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Missing Bearer token")
    return credentials.credentials


async def get_current_user_id(
    token: str = Depends(get_bearer_token),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> str:
    """
    Verify the Bearer access token, returning the authenticated
    ``user_id`` (UUID string).
    """
    try:
        return issuer.verify(token, ACCESS_TOKEN).sub
    except InvalidTokenError as exc:
        raise UnauthorizedError(f"Invalid or expired token: {exc}")
