"""
Client-side user and token models.
"""

from __future__ import annotations

import time
from typing import List, Optional

from pydantic import BaseModel, Field


def now_ms() -> int:
    return int(time.time() * 1000)


class UserModel(BaseModel):
    id: str
    email: str
    name: str
    picture: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    locale: Optional[str] = None
    verified_email: bool = False
    roles: List[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @property
    def initials(self) -> str:
        if self.given_name and self.family_name:
            return f"{self.given_name[0]}{self.family_name[0]}".upper()
        return self.display_name[:1].upper()

    def has_profile_picture(self) -> bool:
        return bool(self.picture)

    def is_email_verified(self) -> bool:
        return self.verified_email is True

    def has_role(self, *roles: str) -> bool:
        return any(role in self.roles for role in roles)


class AuthTokens(BaseModel):
    """Token pair as received, plus the absolute expiry computed on arrival."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: int
    token_type: str = "Bearer"
    expires_at: int = Field(default=0, exclude=True)  # epoch millis

    def model_post_init(self, __context) -> None:
        if not self.expires_at:
            self.expires_at = now_ms() + self.expires_in * 1000

    def is_expired(self) -> bool:
        return now_ms() >= self.expires_at

    def is_expiring_soon(self, minutes: int = 5) -> bool:
        return now_ms() >= self.expires_at - minutes * 60 * 1000

    def has_refresh_token(self) -> bool:
        return bool(self.refresh_token)

    def time_to_expiry(self) -> int:
        """Milliseconds left, never negative."""
        return max(0, self.expires_at - now_ms())
