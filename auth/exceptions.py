"""
Auth error taxonomy.

Every failure the auth service reports is one of these three kinds; the
exception handlers in ``api/errors.py`` turn them into the JSON envelope.
"""

from __future__ import annotations

from typing import Any, Dict


class AuthError(Exception):
    """
    Base exception for the auth service.

    Carries a human-readable ``message``, a machine-readable ``code`` and the
    HTTP ``status_code`` it maps to at the boundary.
    """

    code = "AUTH_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "error": self.code}


class ConflictError(AuthError):
    """Duplicate registration."""

    code = "CONFLICT"
    status_code = 409


class UnauthorizedError(AuthError):
    """Bad credentials, disabled account, invalid refresh token, missing user."""

    code = "UNAUTHORIZED"
    status_code = 401


class BadRequestError(AuthError):
    """Malformed Google credential, password login on a Google-only account."""

    code = "BAD_REQUEST"
    status_code = 400
