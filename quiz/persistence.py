"""
Profile persistence over a string key-value store.

Supports an in-memory store for tests, a JSON file that plays the role of the
browser's local storage, and a Redis-backed store for shared deployments.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

from shared.profile_convert import profile_from_dict, profile_to_dict
from shared.types import UserProfile

logger = logging.getLogger(__name__)

TOKEN_KEY = "google_token"
USER_KEY_PREFIX = "user_"


class PersistenceError(Exception):
    """Raised when the backing store cannot be read or written."""


def user_key(email: str) -> str:
    return f"{USER_KEY_PREFIX}{email}"


class KeyValueStore(Protocol):
    """Minimal string store, modelled on the browser's localStorage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


@dataclass
class InMemoryKeyValueStore:
    """Test double for the key-value store."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileKeyValueStore:
    """Keeps every key in a single JSON object on disk."""

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Atomic replace: readers never see a partially written store.
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)


@dataclass
class RedisKeyValueStore:
    """Redis-backed store using plain string keys under a namespace."""

    url: str
    namespace: str = "blindl:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, key: str) -> str:
        return f"{self.namespace}{key}"

    def get_item(self, key: str) -> Optional[str]:
        value = self.client.get(self._key(key))
        if value is None:
            return None
        return value.decode("utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.client.set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self.client.delete(self._key(key))


_STORE_ERRORS = (OSError, ValueError, redis_exceptions.RedisError)


class PersistenceClient:
    """Reads and writes whole user profiles keyed by email."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self, email: str) -> Optional[UserProfile]:
        try:
            raw = self.store.get_item(user_key(email))
            if raw is None:
                return None
            return profile_from_dict(json.loads(raw))
        except _STORE_ERRORS as exc:
            raise PersistenceError(f"Failed to load profile for {email}") from exc

    def save(self, profile: UserProfile) -> None:
        """Overwrites whatever was stored for ``profile.email``."""
        try:
            self.store.set_item(
                user_key(profile.email), json.dumps(profile_to_dict(profile))
            )
        except _STORE_ERRORS as exc:
            raise PersistenceError(
                f"Failed to save profile for {profile.email}"
            ) from exc
        logger.info("Saved profile for %s", profile.email)

    def load_token(self) -> Optional[str]:
        try:
            return self.store.get_item(TOKEN_KEY)
        except _STORE_ERRORS as exc:
            raise PersistenceError("Failed to read stored credential") from exc

    def save_token(self, token: str) -> None:
        try:
            self.store.set_item(TOKEN_KEY, token)
        except _STORE_ERRORS as exc:
            raise PersistenceError("Failed to store credential") from exc

    def clear_token(self) -> None:
        try:
            self.store.remove_item(TOKEN_KEY)
        except _STORE_ERRORS as exc:
            raise PersistenceError("Failed to clear stored credential") from exc
