"""
Credential store — find / create / update operations on ``User`` rows.

Every write commits immediately, so each update is atomic per user row.
The auth service never issues raw queries; it only talks to ``UserStore``.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import User

logger = logging.getLogger(__name__)

_GOOGLE_FIELDS = (
    "google_id",
    "picture",
    "given_name",
    "family_name",
    "locale",
    "email_verified",
)


class DuplicateUserError(Exception):
    """Raised when a create collides with the unique email / google_id."""


def _to_uuid(value: str | uuid.UUID) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(value)
    except (TypeError, ValueError):
        return None


class UserStore:
    """Thin CRUD wrapper around an ``AsyncSession``."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_by_google_id(self, google_id: str) -> Optional[User]:
        if not google_id:
            return None
        result = await self._session.execute(
            select(User).where(User.google_id == google_id)
        )
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str | uuid.UUID) -> Optional[User]:
        uid = _to_uuid(user_id)
        if uid is None:
            return None
        return await self._session.get(User, uid)

    async def create(self, **fields: Any) -> User:
        user = User(user_id=uuid.uuid4(), **fields)
        self._session.add(user)
        try:
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise DuplicateUserError(str(exc.orig)) from exc
        logger.info("Created %s user %s (%s)", user.provider, user.email, user.user_id)
        return user

    async def update_refresh_token(
        self, user_id: str | uuid.UUID, refresh_token: Optional[str]
    ) -> None:
        await self._update(user_id, {"refresh_token": refresh_token})

    async def update_last_login(self, user_id: str | uuid.UUID) -> None:
        await self._update(user_id, {"last_login": datetime.now(timezone.utc)})

    async def update_google_data(
        self, user_id: str | uuid.UUID, google_data: Dict[str, Any]
    ) -> Optional[User]:
        """Attach Google profile fields to an existing user; returns the updated row."""
        fields = {k: v for k, v in google_data.items() if k in _GOOGLE_FIELDS}
        return await self._update(user_id, fields)

    async def _update(
        self, user_id: str | uuid.UUID, fields: Dict[str, Any]
    ) -> Optional[User]:
        user = await self.find_by_id(user_id)
        if user is None:
            logger.warning("Update skipped, user %s not found", user_id)
            return None
        for key, value in fields.items():
            setattr(user, key, value)
        await self._session.commit()
        return user
