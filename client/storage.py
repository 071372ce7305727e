"""
Durable client-side token storage.

``FileTokenStorage`` keeps the session in a JSON file so it survives a
restart.  When a Fernet key is configured (``TOKEN_ENCRYPTION_KEY``) the file
is encrypted with the ``cryptography`` library; otherwise it is plaintext.
Generate a key with::

    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from __future__ import annotations

import json
import logging
import os
import pathlib
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)


class StorageKeys:
    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"
    USER_DATA = "user_data"
    EXPIRES_AT = "expires_at"

    ALL = (ACCESS_TOKEN, REFRESH_TOKEN, USER_DATA, EXPIRES_AT)


class TokenStorage:
    """String key/value store with the semantics of browser local storage."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryTokenStorage(TokenStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileTokenStorage(TokenStorage):
    """JSON file store, rewritten on every change."""

    def __init__(self, path: str | os.PathLike, encryption_key: str = ""):
        self._path = pathlib.Path(path)
        self._fernet: Optional[Fernet] = None
        if encryption_key:
            self._fernet = Fernet(encryption_key.encode())
        else:
            logger.warning("Token file %s is not encrypted (no TOKEN_ENCRYPTION_KEY)", self._path)
        self._data = self._load()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._save()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._save()

    def _load(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        raw = self._path.read_bytes()
        if self._fernet is not None:
            try:
                raw = self._fernet.decrypt(raw)
            except InvalidToken:
                logger.warning("Token file %s could not be decrypted; starting empty", self._path)
                return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Token file %s is corrupt; starting empty", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Token file %s does not hold an object; starting empty", self._path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _save(self) -> None:
        raw = json.dumps(self._data).encode()
        if self._fernet is not None:
            raw = self._fernet.encrypt(raw)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_bytes(raw)
        os.replace(tmp, self._path)
