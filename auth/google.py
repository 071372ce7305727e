"""
Google ID-token verification.

Wraps ``google.oauth2.id_token.verify_oauth2_token``; the certificate fetch is
blocking, so it runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

logger = logging.getLogger(__name__)


class GoogleTokenVerifier:
    """Verifies a Google Sign-In credential against an expected audience."""

    def __init__(self) -> None:
        self._request = google_requests.Request()

    async def verify(self, credential: str, audience: str) -> Optional[Dict[str, Any]]:
        """
        Return the verified ID-token payload.

        Raises ``ValueError`` (from google-auth) when the signature, issuer,
        audience or expiry is wrong.
        """
        payload = await asyncio.to_thread(
            id_token.verify_oauth2_token, credential, self._request, audience
        )
        logger.debug("Verified Google credential for sub=%s", (payload or {}).get("sub"))
        return payload
