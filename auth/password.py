"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import bcrypt

from config.settings import config


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt (auto-salted, work factor from ``config.bcrypt_rounds``)."""
    salt = bcrypt.gensalt(rounds=rounds or config.bcrypt_rounds)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: str | None) -> bool:
    """Constant-time comparison against a bcrypt hash; False when no hash is stored."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except (ValueError, TypeError):
        return False
