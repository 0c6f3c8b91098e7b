from __future__ import annotations

import json
from dataclasses import dataclass, field

import pytest
import redis

from shopfront.core.config import Settings, StorageConfig
from shopfront.core.exceptions import StorageException
from shopfront.integrations.kv_storage import (
    JsonFileKeyValueStorage,
    MemoryKeyValueStorage,
    RedisKeyValueStorage,
    create_storage,
)
from shopfront.services.cart_store import CartStore


@dataclass
class FakeRedisClient:
    data: dict[str, str] = field(default_factory=dict)
    expiry: dict[str, int] = field(default_factory=dict)
    fail: bool = False

    def ping(self) -> bool:
        return True

    def get(self, key: str):
        if self.fail:
            raise redis.ConnectionError("down")
        return self.data.get(key)

    def set(self, key: str, value: str):
        if self.fail:
            raise redis.ConnectionError("down")
        self.data[key] = value
        return True

    def setex(self, key: str, ttl: int, value: str) -> bool:
        if self.fail:
            raise redis.ConnectionError("down")
        self.data[key] = value
        self.expiry[key] = ttl
        return True


@pytest.fixture
def fake_redis(monkeypatch):
    import shopfront.integrations.kv_storage as kv_module

    client = FakeRedisClient()
    monkeypatch.setattr(kv_module.redis, "from_url", lambda *args, **kwargs: client)
    return client


def test_memory_storage_round_trip() -> None:
    storage = MemoryKeyValueStorage()
    assert storage.load("a") is None
    assert storage.save("a", "1")
    assert storage.load("a") == "1"


class TestJsonFileStorage:
    def test_missing_file_loads_none(self, tmp_path) -> None:
        storage = JsonFileKeyValueStorage(str(tmp_path / "carts.json"))
        assert storage.load("k") is None

    def test_save_creates_directories_and_keeps_other_keys(self, tmp_path) -> None:
        path = tmp_path / "nested" / "carts.json"
        storage = JsonFileKeyValueStorage(str(path))

        assert storage.save("a", '{"1": 1}')
        assert storage.save("b", '{"2": 2}')

        document = json.loads(path.read_text(encoding="utf-8"))
        assert document == {"a": '{"1": 1}', "b": '{"2": 2}'}
        assert not (tmp_path / "nested" / "carts.json.tmp").exists()

    def test_corrupt_file_raises_on_load_and_is_rewritten_on_save(self, tmp_path) -> None:
        path = tmp_path / "carts.json"
        path.write_text("{broken", encoding="utf-8")
        storage = JsonFileKeyValueStorage(str(path))

        with pytest.raises(StorageException):
            storage.load("k")
        assert storage.save("k", "{}")
        assert storage.load("k") == "{}"

    def test_cart_survives_restart_through_file(self, tmp_path) -> None:
        path = str(tmp_path / "carts.json")
        cart = CartStore(JsonFileKeyValueStorage(path), "user:1")
        cart.add("7", 2)

        reloaded = CartStore(JsonFileKeyValueStorage(path), "user:1")
        assert reloaded.snapshot() == {"7": 2}

    def test_corrupt_file_gives_empty_cart(self, tmp_path) -> None:
        path = tmp_path / "carts.json"
        path.write_text("[]", encoding="utf-8")

        cart = CartStore(JsonFileKeyValueStorage(str(path)), "user:1")
        assert cart.is_empty()


class TestRedisStorage:
    def test_carts_are_shared_between_instances(self, fake_redis) -> None:
        CartStore(RedisKeyValueStorage("redis://fake"), "cart:1").add("2", 3)

        reloaded = CartStore(RedisKeyValueStorage("redis://fake"), "cart:1")
        assert reloaded.snapshot() == {"2": 3}

    def test_ttl_is_applied_when_configured(self, fake_redis) -> None:
        storage = RedisKeyValueStorage("redis://fake", ttl_seconds=60)
        storage.save("k", "v")
        assert fake_redis.expiry["k"] == 60

    def test_connection_failure_degrades_to_memory(self, fake_redis) -> None:
        storage = RedisKeyValueStorage("redis://fake")
        cart = CartStore(storage, "cart:1")
        fake_redis.fail = True

        cart.add("1")

        assert storage.degraded
        assert cart.last_save_ok is False
        assert cart.quantity("1") == 1
        assert storage.load("cart:1") == '{"1": 1}'

    def test_missing_url_uses_memory(self, monkeypatch) -> None:
        monkeypatch.delenv("REDIS_URL", raising=False)
        storage = RedisKeyValueStorage(None)
        assert storage.degraded
        assert storage.save("k", "v") is False
        assert storage.load("k") == "v"


def _settings(backend: str, tmp_path) -> Settings:
    return Settings(
        bot_token=None,
        storage=StorageConfig(backend=backend, path=str(tmp_path / "c.json"), redis_url=None, key="k"),
        overlay_hide_delay=0.22,
        search_debounce=0.22,
        log_level="INFO",
    )


def test_create_storage_picks_backend(tmp_path) -> None:
    assert isinstance(create_storage(_settings("memory", tmp_path)), MemoryKeyValueStorage)
    assert isinstance(create_storage(_settings("file", tmp_path)), JsonFileKeyValueStorage)
