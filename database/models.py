"""
SQLAlchemy ORM models for the credential store.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase


PROVIDER_LOCAL = "local"
PROVIDER_GOOGLE = "google"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    name = Column(String(128), nullable=False)
    password_hash = Column(String(255), nullable=True)  # NULL for Google-only accounts

    google_id = Column(String(255), unique=True, nullable=True)
    provider = Column(String(16), nullable=False, default=PROVIDER_LOCAL)
    picture = Column(Text)
    given_name = Column(String(128))
    family_name = Column(String(128))
    locale = Column(String(32))
    email_verified = Column(Boolean, nullable=False, default=False)

    roles = Column(JSON, nullable=False, default=lambda: ["user"])
    is_active = Column(Boolean, nullable=False, default=True)
    refresh_token = Column(Text, nullable=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_now)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)
