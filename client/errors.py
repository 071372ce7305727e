"""
Client-side error kinds and HTTP status classification.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class AuthErrorKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    NETWORK_ERROR = "network_error"
    TOKEN_EXPIRED = "token_expired"
    UNAUTHORIZED = "unauthorized"
    SERVER_ERROR = "server_error"
    VALIDATION_ERROR = "validation_error"
    GOOGLE_AUTH_ERROR = "google_auth_error"
    UNEXPECTED_ERROR = "unexpected_error"


ERROR_MESSAGES = {
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorKind.NETWORK_ERROR: "Unable to reach the server. Check your connection",
    AuthErrorKind.TOKEN_EXPIRED: "Your session has expired. Please sign in again",
    AuthErrorKind.UNAUTHORIZED: "You are not authorized. Please sign in again",
    AuthErrorKind.SERVER_ERROR: "The server encountered an error. Try again later",
    AuthErrorKind.VALIDATION_ERROR: "Some of the submitted data is invalid",
    AuthErrorKind.GOOGLE_AUTH_ERROR: "Google sign-in could not be completed",
    AuthErrorKind.UNEXPECTED_ERROR: "An unexpected error occurred",
}


def display_message(kind: AuthErrorKind) -> str:
    return ERROR_MESSAGES.get(kind, ERROR_MESSAGES[AuthErrorKind.UNEXPECTED_ERROR])


class AuthClientError(Exception):
    """
    A failed auth call, classified.

    ``detail`` keeps the server's message (if any) for logging; ``message`` is
    what the user should see.
    """

    def __init__(
        self,
        kind: AuthErrorKind,
        message: Optional[str] = None,
        *,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.kind = kind
        self.message = message or display_message(kind)
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.message)


def classify_status(status_code: Optional[int], default: AuthErrorKind) -> AuthErrorKind:
    """
    Map an HTTP status to an error kind.

    ``None`` means the request never got a response.  Other 4xx statuses fall
    back to the calling operation's ``default``.
    """
    if status_code is None:
        return AuthErrorKind.NETWORK_ERROR
    if status_code == 401:
        return AuthErrorKind.UNAUTHORIZED
    if status_code == 422:
        return AuthErrorKind.VALIDATION_ERROR
    if status_code >= 500:
        return AuthErrorKind.SERVER_ERROR
    if 400 <= status_code < 500:
        return default
    return AuthErrorKind.UNEXPECTED_ERROR
