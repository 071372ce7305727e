"""
Tests for token storage backends.
"""

import json

import pytest
from cryptography.fernet import Fernet

from client.storage import FileTokenStorage, MemoryTokenStorage, StorageKeys


class TestMemoryTokenStorage:
    def test_set_get_remove(self):
        storage = MemoryTokenStorage()
        storage.set(StorageKeys.ACCESS_TOKEN, "at")
        assert storage.get(StorageKeys.ACCESS_TOKEN) == "at"
        storage.remove(StorageKeys.ACCESS_TOKEN)
        storage.remove(StorageKeys.ACCESS_TOKEN)
        assert storage.get(StorageKeys.ACCESS_TOKEN) is None


class TestFileTokenStorage:
    def test_survives_restart(self, tmp_path):
        path = tmp_path / "session.json"
        FileTokenStorage(path).set(StorageKeys.ACCESS_TOKEN, "at")

        assert FileTokenStorage(path).get(StorageKeys.ACCESS_TOKEN) == "at"
        assert json.loads(path.read_text()) == {"access_token": "at"}

    def test_encrypted_file(self, tmp_path):
        path = tmp_path / "nested" / "session.bin"
        key = Fernet.generate_key().decode()

        storage = FileTokenStorage(path, key)
        storage.set(StorageKeys.REFRESH_TOKEN, "rt-secret")

        assert b"rt-secret" not in path.read_bytes()
        assert FileTokenStorage(path, key).get(StorageKeys.REFRESH_TOKEN) == "rt-secret"

    def test_wrong_key_starts_empty(self, tmp_path):
        path = tmp_path / "session.bin"
        FileTokenStorage(path, Fernet.generate_key().decode()).set(StorageKeys.ACCESS_TOKEN, "at")

        storage = FileTokenStorage(path, Fernet.generate_key().decode())
        assert storage.get(StorageKeys.ACCESS_TOKEN) is None

    @pytest.mark.parametrize("content", ["{broken", "[]", "\"at\"", "null", "42"])
    def test_corrupt_file_starts_empty(self, tmp_path, content):
        path = tmp_path / "session.json"
        path.write_text(content)

        storage = FileTokenStorage(path)

        assert storage.get(StorageKeys.ACCESS_TOKEN) is None
        storage.set(StorageKeys.ACCESS_TOKEN, "at")
        assert json.loads(path.read_text()) == {"access_token": "at"}

    def test_remove_persists(self, tmp_path):
        path = tmp_path / "session.json"
        storage = FileTokenStorage(path)
        storage.set(StorageKeys.ACCESS_TOKEN, "at")
        storage.set(StorageKeys.USER_DATA, "{}")
        storage.remove(StorageKeys.ACCESS_TOKEN)

        assert json.loads(path.read_text()) == {"user_data": "{}"}
