"""Key-value storage backends for the persisted cart blob.

Every backend exposes ``load(key) -> str | None`` and
``save(key, blob) -> bool``. ``load`` raises ``StorageException`` when the
backing store cannot be read; ``save`` reports failure by returning
``False``. Callers treat both as fallible.
"""
from __future__ import annotations

import json
import logging
import os
from typing import Any, Protocol

import redis

from shopfront.core.config import Settings
from shopfront.core.exceptions import StorageException

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    def load(self, key: str) -> str | None: ...

    def save(self, key: str, blob: str) -> bool: ...


class MemoryKeyValueStorage:
    """Process-local storage. Used for local development and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def load(self, key: str) -> str | None:
        return self._data.get(key)

    def save(self, key: str, blob: str) -> bool:
        self._data[key] = blob
        return True


class JsonFileKeyValueStorage:
    """All keys kept in one JSON document, rewritten atomically on save."""

    def __init__(self, path: str) -> None:
        self.path = path

    def _read_document(self) -> dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, ValueError) as exc:
            raise StorageException(self.path, str(exc)) from exc
        if not isinstance(document, dict):
            raise StorageException(self.path, "document is not a JSON object")
        return document

    def load(self, key: str) -> str | None:
        value = self._read_document().get(key)
        return value if isinstance(value, str) else None

    def save(self, key: str, blob: str) -> bool:
        try:
            document = self._read_document()
        except StorageException as exc:
            logger.warning("Cart storage file unreadable, rewriting it: %s", exc)
            document = {}
        document[key] = blob

        tmp = self.path + ".tmp"
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.warning("Cart storage write failed for %s: %s", key, exc)
            return False
        return True


class RedisKeyValueStorage:
    """Redis-backed storage with an in-memory fallback.

    A failing Redis connection switches the instance to memory mode; saves
    made after that return ``False`` so callers know durability is gone.
    """

    def __init__(self, redis_url: str | None = None, ttl_seconds: int | None = None):
        self._redis_url = redis_url or os.getenv("REDIS_URL")
        self._ttl_seconds = ttl_seconds
        self._memory = MemoryKeyValueStorage()
        self._client = self._init_client()

    @property
    def degraded(self) -> bool:
        return self._client is None

    def _init_client(self):
        if not self._redis_url:
            logger.warning("REDIS_URL is not set; cart storage uses in-memory fallback")
            return None
        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis cart storage enabled")
            return client
        except redis.RedisError as exc:
            logger.warning("Redis cart storage init failed, fallback to in-memory: %s", exc)
            return None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis cart storage fallback to memory mode: %s", reason)
        self._client = None

    def load(self, key: str) -> str | None:
        if not self._client:
            return self._memory.load(key)
        try:
            raw = self._client.get(key)
        except redis.RedisError as exc:
            self._switch_to_memory_fallback(exc)
            raise StorageException(key, str(exc)) from exc
        return raw if isinstance(raw, str) else None

    def save(self, key: str, blob: str) -> bool:
        self._memory.save(key, blob)
        if not self._client:
            return False
        try:
            if self._ttl_seconds:
                self._client.setex(key, self._ttl_seconds, blob)
            else:
                self._client.set(key, blob)
            return True
        except redis.RedisError as exc:
            self._switch_to_memory_fallback(exc)
            return False


def create_storage(settings: Settings) -> KeyValueStorage:
    """Pick the storage backend configured in settings."""
    backend = settings.storage.backend
    if backend == "redis":
        return RedisKeyValueStorage(settings.storage.redis_url)
    if backend == "file":
        logger.info("Using JSON file cart storage at %s", settings.storage.path)
        return JsonFileKeyValueStorage(settings.storage.path)
    logger.info("Using in-memory cart storage (carts are lost on restart)")
    return MemoryKeyValueStorage()
