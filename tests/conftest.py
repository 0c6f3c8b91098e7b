"""Shared pytest fixtures: a hand-driven scheduler, storage and shop objects."""
from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable
from typing import Any

import pytest

from shopfront.domain.catalog_data import default_lookup
from shopfront.integrations.kv_storage import MemoryKeyValueStorage
from shopfront.services.cart_store import CartStore
from shopfront.services.overlay_controller import OverlaySurfaceController
from shopfront.services.shop_session import ShopSession


class ManualHandle:
    def __init__(self, when: float, callback: Callable[[], Any]) -> None:
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock: callbacks run only when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, ManualHandle]] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], Any]) -> ManualHandle:
        handle = ManualHandle(self.now + max(0.0, delay), callback)
        heapq.heappush(self._queue, (handle.when, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, seconds: float = 0.0) -> None:
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            self.now = when
            if not handle.cancelled:
                handle.callback()
        self.now = target

    def run_all(self) -> None:
        while self._queue:
            self.advance(self._queue[0][0] - self.now)


class FailingStorage:
    """Storage whose writes always fail; reads return a preset blob."""

    def __init__(self, blob: str | None = None) -> None:
        self.blob = blob
        self.save_calls = 0

    def load(self, key: str) -> str | None:
        return self.blob

    def save(self, key: str, blob: str) -> bool:
        self.save_calls += 1
        return False


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def lookup():
    return default_lookup()


@pytest.fixture()
def storage() -> MemoryKeyValueStorage:
    return MemoryKeyValueStorage()


@pytest.fixture()
def cart(storage: MemoryKeyValueStorage) -> CartStore:
    return CartStore(storage, "test_cart")


@pytest.fixture()
def controller(scheduler: ManualScheduler) -> OverlaySurfaceController:
    return OverlaySurfaceController(scheduler, hide_delay=0.22)


@pytest.fixture()
def session(lookup, cart: CartStore, scheduler: ManualScheduler) -> ShopSession:
    return ShopSession(lookup, cart, scheduler, hide_delay=0.22, search_debounce=0.22)
