"""External collaborators: persistence backends."""

from .kv_storage import (
    JsonFileKeyValueStorage,
    KeyValueStorage,
    MemoryKeyValueStorage,
    RedisKeyValueStorage,
    create_storage,
)

__all__ = [
    "KeyValueStorage",
    "MemoryKeyValueStorage",
    "JsonFileKeyValueStorage",
    "RedisKeyValueStorage",
    "create_storage",
]
