"""
JWT token issuance and verification.

Access and refresh tokens share one HS256 secret and one claim payload
(``sub``, ``email``, ``roles``); only their expiry differs.  Verification is a
pure signature + expiry check; whether a refresh token is still the *current*
one is decided by the auth service against the stored value.

Secret and lifetimes are loaded from ``config`` (env vars: ``JWT_SECRET``,
``JWT_EXPIRES_IN``, ``JWT_REFRESH_EXPIRES_IN``).
"""

from __future__ import annotations

import time
import uuid
from typing import List, Optional

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, Field

from config.settings import config

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


class InvalidTokenError(Exception):
    """Token signature, format or claims are invalid."""


class ExpiredTokenError(InvalidTokenError):
    """Token signature is valid but ``exp`` has passed."""


class TokenClaims(BaseModel):
    sub: str
    email: str
    roles: List[str] = Field(default_factory=list)
    iat: int
    exp: int
    jti: Optional[str] = None
    typ: Optional[str] = None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int
    token_type: str = "Bearer"


class TokenIssuer:
    """Signs and verifies access / refresh tokens with a single shared secret."""

    def __init__(
        self,
        secret: str | None = None,
        *,
        algorithm: str | None = None,
        access_ttl: int | None = None,
        refresh_ttl: int | None = None,
    ):
        self._secret = secret or config.jwt_secret
        self._algorithm = algorithm or config.jwt_algorithm
        self.access_ttl = access_ttl if access_ttl is not None else config.jwt_expires_in
        self.refresh_ttl = (
            refresh_ttl if refresh_ttl is not None else config.jwt_refresh_expires_in
        )

    def issue(self, user_id: str, email: str, roles: List[str]) -> TokenPair:
        """Create an access / refresh pair for the given identity."""
        payload = {"sub": str(user_id), "email": email, "roles": list(roles or [])}
        return TokenPair(
            access_token=self._sign({**payload, "typ": ACCESS_TOKEN}, self.access_ttl),
            refresh_token=self._sign({**payload, "typ": REFRESH_TOKEN}, self.refresh_ttl),
            expires_in=self.access_ttl,
        )

    def verify(self, token: str, expected_type: str | None = None) -> TokenClaims:
        """
        Verify signature and expiry, returning the decoded claims.

        With ``expected_type`` the ``typ`` claim must match, so a refresh
        token is never accepted where an access token is required.

        Raises ``ExpiredTokenError`` for expired tokens and
        ``InvalidTokenError`` for everything else.
        """
        if not token:
            raise InvalidTokenError("empty token")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as exc:
            raise ExpiredTokenError("token expired") from exc
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        try:
            claims = TokenClaims(**payload)
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError(f"malformed claims: {exc}") from exc

        if expected_type is not None and claims.typ != expected_type:
            raise InvalidTokenError(f"expected {expected_type} token, got {claims.typ}")
        return claims

    def _sign(self, payload: dict, ttl: int) -> str:
        now = int(time.time())
        claims = {
            **payload,
            "iat": now,
            "exp": now + ttl,
            # unique per token
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)
