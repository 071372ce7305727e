"""
Route guards — decide whether a navigation may proceed.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from client.errors import AuthClientError
from client.navigation import Navigator
from client.session import SessionManager

logger = logging.getLogger(__name__)


class AuthGuard:
    """Lets signed-in users through; everyone else goes to the login page."""

    def __init__(self, session: SessionManager, navigator: Navigator):
        self._session = session
        self._navigator = navigator

    async def can_activate(self, url: str) -> bool:
        if self._session.is_authenticated():
            return True

        try:
            allowed = await self._session.check_auth_status()
        except AuthClientError as exc:
            logger.warning("Auth check failed for %s: %s", url, exc.kind.value)
            allowed = False

        if not allowed:
            self._deny(url)
        return allowed

    async def can_activate_child(self, url: str) -> bool:
        return await self.can_activate(url)

    async def can_load(self, segments: Sequence[str]) -> bool:
        return await self.can_activate("/" + "/".join(segments))

    def _deny(self, attempted_url: str) -> None:
        logger.info("Access denied to: %s", attempted_url)
        self._navigator.remember_redirect(attempted_url)
        self._navigator.navigate_to_login()


class GuestGuard:
    """For login / register pages: signed-in users are sent back where they were going."""

    def __init__(self, session: SessionManager, navigator: Navigator):
        self._session = session
        self._navigator = navigator

    def can_activate(self) -> bool:
        if self._session.is_authenticated():
            self._navigator.navigate(self._navigator.pop_redirect())
            return False
        return True


class RoleGuard:
    """Requires the current user to hold at least one of ``required_roles``."""

    def __init__(self, session: SessionManager, navigator: Navigator):
        self._session = session
        self._navigator = navigator

    def can_activate(self, required_roles: Iterable[str] = ()) -> bool:
        required = list(required_roles)
        if not required:
            return True

        user = self._session.get_current_user()
        if user is None:
            self._navigator.navigate_to_login()
            return False
        if not user.has_role(*required):
            logger.info("User %s lacks roles %s", user.email, required)
            return False
        return True
