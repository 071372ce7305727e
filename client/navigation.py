"""
Navigator — the client's current location and the post-login redirect memory.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from config.settings import config

logger = logging.getLogger(__name__)


class Navigator:
    def __init__(
        self,
        initial_url: str = "/",
        *,
        login_path: str | None = None,
        default_redirect: str | None = None,
    ):
        self.current_url = initial_url
        self.login_path = login_path or config.login_path
        self.default_redirect = default_redirect or config.default_redirect_path
        self.history: List[str] = [initial_url]
        self._redirect_url: Optional[str] = None

    def navigate(self, url: str) -> None:
        logger.debug("Navigate %s -> %s", self.current_url, url)
        self.current_url = url
        self.history.append(url)

    def navigate_to_login(self) -> None:
        self.navigate(self.login_path)

    def remember_redirect(self, url: str) -> None:
        """Save ``url`` for resumption after login (the login page itself is ignored)."""
        if url and url != self.login_path:
            self._redirect_url = url

    @property
    def redirect_url(self) -> Optional[str]:
        return self._redirect_url

    def pop_redirect(self) -> str:
        """Return and forget the saved URL, falling back to the default page."""
        url = self._redirect_url or self.default_redirect
        self._redirect_url = None
        return url
