from __future__ import annotations

import asyncio

import pytest

from shopfront.core.scheduler import AsyncioScheduler, Debouncer
from shopfront.services.overlay_controller import OverlaySurfaceController

from conftest import ManualScheduler


def test_debouncer_runs_only_latest_call(scheduler: ManualScheduler) -> None:
    calls: list[str] = []
    debouncer = Debouncer(scheduler, 0.2)

    debouncer.call(lambda: calls.append("a"))
    debouncer.call(lambda: calls.append("b"))
    assert debouncer.pending

    scheduler.advance(0.2)
    assert calls == ["b"]
    assert not debouncer.pending


def test_debouncer_cancel(scheduler: ManualScheduler) -> None:
    calls: list[str] = []
    debouncer = Debouncer(scheduler, 0.2)
    debouncer.call(lambda: calls.append("a"))
    debouncer.cancel()

    scheduler.advance(1)
    assert calls == []


@pytest.mark.asyncio
async def test_asyncio_scheduler_runs_and_cancels() -> None:
    scheduler = AsyncioScheduler()
    fired: list[str] = []

    scheduler.call_later(0.01, lambda: fired.append("kept"))
    handle = scheduler.call_later(0.01, lambda: fired.append("canceled"))
    handle.cancel()

    await asyncio.sleep(0.05)
    assert fired == ["kept"]


@pytest.mark.asyncio
async def test_overlay_on_real_event_loop() -> None:
    controller = OverlaySurfaceController(AsyncioScheduler(), hide_delay=0.02)

    controller.open_cart()
    controller.close_current()
    controller.open_cart()
    await asyncio.sleep(0.1)

    assert controller.overlay.mounted
    assert controller.overlay.shown
    assert controller.pending_timers == 0

    controller.close_current()
    await asyncio.sleep(0.1)
    assert not controller.overlay.mounted
