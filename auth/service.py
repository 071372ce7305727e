"""
Auth service — registration, password login, Google login, refresh, logout.

Each operation is one flow against ``UserStore`` + ``TokenIssuer``; nothing is
kept between requests.  The refresh token stored on the user row is the only
server-side session state: overwriting it revokes every earlier refresh token.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Protocol

from auth.exceptions import BadRequestError, ConflictError, UnauthorizedError
from auth.jwt import REFRESH_TOKEN, InvalidTokenError, TokenIssuer
from auth.password import hash_password, verify_password
from auth.schemas import AuthResponse, UserDto
from database.models import PROVIDER_GOOGLE, PROVIDER_LOCAL, User
from database.user_store import DuplicateUserError, UserStore

logger = logging.getLogger(__name__)


class IdTokenVerifier(Protocol):
    async def verify(self, credential: str, audience: str) -> Optional[Dict[str, Any]]:
        ...


class AuthService:
    def __init__(
        self,
        store: UserStore,
        issuer: TokenIssuer,
        google_verifier: Optional[IdTokenVerifier] = None,
        *,
        google_client_id: str = "",
        bcrypt_rounds: int | None = None,
    ):
        self._store = store
        self._issuer = issuer
        self._google = google_verifier
        self._google_client_id = google_client_id
        self._bcrypt_rounds = bcrypt_rounds

    # ── Password accounts ───────────────────────────────────────────────

    async def register(self, email: str, password: str, name: str) -> AuthResponse:
        """Create a local account and sign it in."""
        if await self._store.find_by_email(email) is not None:
            raise ConflictError("User already exists with this email")

        password_hash = await asyncio.to_thread(
            hash_password, password, self._bcrypt_rounds
        )
        try:
            user = await self._store.create(
                email=email,
                name=name,
                password_hash=password_hash,
                provider=PROVIDER_LOCAL,
                email_verified=False,
                roles=["user"],
            )
        except DuplicateUserError:
            # lost a race with a concurrent registration
            raise ConflictError("User already exists with this email")

        logger.info("Registered user %s (%s)", email, user.user_id)
        return await self._sign_in(user, "User registered successfully")

    async def login(self, email: str, password: str) -> AuthResponse:
        user = await self._store.find_by_email(email)
        if user is None:
            raise UnauthorizedError("Invalid credentials")

        if not user.password_hash:
            raise BadRequestError("This user must sign in with Google")

        valid = await asyncio.to_thread(verify_password, password, user.password_hash)
        if not valid:
            logger.info("Failed login for %s", email)
            raise UnauthorizedError("Invalid credentials")

        if not user.is_active:
            raise UnauthorizedError("Account disabled")

        await self._store.update_last_login(user.user_id)
        logger.info("Login: %s (%s)", user.email, user.user_id)
        return await self._sign_in(user, "Login successful")

    # ── Google ──────────────────────────────────────────────────────────

    async def login_with_google(
        self, credential: str, expected_client_id: str
    ) -> AuthResponse:
        """
        Sign in with a Google ID token, creating or linking the account.

        An existing user is looked up by email first, then by Google subject
        id.  A match without a linked ``google_id`` gets the Google profile
        merged in (the local password, if any, is kept).  Every failure is
        reported as ``BadRequestError`` with the underlying cause in the
        message.
        """
        if self._google_client_id and expected_client_id != self._google_client_id:
            raise BadRequestError("Error validating Google token: unexpected client id")
        if self._google is None:
            raise BadRequestError("Error validating Google token: Google sign-in is not configured")

        try:
            payload = await self._google.verify(credential, expected_client_id)
            if not payload:
                raise BadRequestError("Invalid Google token")

            google_id = payload.get("sub")
            email = payload.get("email")
            if not google_id or not email:
                raise BadRequestError("Google token is missing subject or email")

            google_data = {
                "google_id": google_id,
                "picture": payload.get("picture"),
                "given_name": payload.get("given_name"),
                "family_name": payload.get("family_name"),
                "locale": payload.get("locale"),
                "email_verified": bool(payload.get("email_verified", False)),
            }

            user = await self._store.find_by_email(email)
            if user is None:
                user = await self._store.find_by_google_id(google_id)

            if user is not None:
                if not user.google_id:
                    user = await self._store.update_google_data(user.user_id, google_data)
                    logger.info("Linked Google account %s to user %s", google_id, email)
            else:
                user = await self._store.create(
                    email=email,
                    name=payload.get("name") or email,
                    provider=PROVIDER_GOOGLE,
                    roles=["user"],
                    **google_data,
                )

            if user is None:
                raise BadRequestError("Error processing Google data")

            await self._store.update_last_login(user.user_id)
            return await self._sign_in(user, "Google login successful")

        except Exception as exc:
            message = exc.message if isinstance(exc, BadRequestError) else str(exc)
            logger.warning("Google login failed: %s", message)
            raise BadRequestError(f"Error validating Google token: {message}") from exc

    # ── Session lifecycle ───────────────────────────────────────────────

    async def refresh_token(self, presented: str) -> AuthResponse:
        """Rotate the token pair; the presented token must be the stored one."""
        try:
            claims = self._issuer.verify(presented, REFRESH_TOKEN)
        except InvalidTokenError as exc:
            logger.info("Refresh rejected: %s", exc)
            raise UnauthorizedError("Invalid refresh token")

        user = await self._store.find_by_id(claims.sub)
        if user is None or user.refresh_token != presented:
            raise UnauthorizedError("Invalid refresh token")
        if not user.is_active:
            raise UnauthorizedError("Account disabled")

        return await self._sign_in(user, "Tokens refreshed successfully")

    async def logout(self, user_id: str) -> None:
        """Clear the stored refresh token; issued access tokens live until expiry."""
        await self._store.update_refresh_token(user_id, None)
        logger.info("Logout: %s", user_id)

    async def get_current_user(self, user_id: str) -> UserDto:
        user = await self._store.find_by_id(user_id)
        if user is None:
            raise UnauthorizedError("User not found")
        return UserDto.from_user(user)

    # ── Helpers ─────────────────────────────────────────────────────────

    async def _sign_in(self, user: User, message: str) -> AuthResponse:
        tokens = self._issuer.issue(str(user.user_id), user.email, list(user.roles or []))
        await self._store.update_refresh_token(user.user_id, tokens.refresh_token)
        return AuthResponse(user=UserDto.from_user(user), tokens=tokens, message=message)
