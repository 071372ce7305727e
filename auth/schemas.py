"""
Request / response schemas for the auth routes.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from auth.jwt import TokenPair
from database.models import User


# ── Requests ───────────────────────────────────────────────────────────


class RegisterRequest(BaseModel):
    email: EmailStr
    # bcrypt only looks at the first 72 bytes
    password: str = Field(..., min_length=6, max_length=72)
    name: str = Field(..., min_length=2, max_length=128)


class LoginRequest(BaseModel):
    # normalized the same way as RegisterRequest.email
    email: EmailStr
    password: str


class GoogleAuthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    credential: str = Field(..., min_length=1)
    client_id: str = Field(..., alias="clientId", min_length=1)


# ── Responses ──────────────────────────────────────────────────────────


class UserDto(BaseModel):
    id: str
    email: str
    name: str
    picture: Optional[str] = None
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    locale: Optional[str] = None
    verified_email: bool = False
    roles: List[str] = Field(default_factory=lambda: ["user"])

    @classmethod
    def from_user(cls, user: User) -> "UserDto":
        return cls(
            id=str(user.user_id),
            email=user.email,
            name=user.name,
            picture=user.picture,
            given_name=user.given_name,
            family_name=user.family_name,
            locale=user.locale,
            verified_email=bool(user.email_verified),
            roles=list(user.roles or []),
        )


class AuthResponse(BaseModel):
    user: UserDto
    tokens: TokenPair
    message: Optional[str] = None
