"""Surface state machine and shared overlay lifecycle.

One controller instance owns the active surface and the overlay snapshot.
Opening any surface supersedes the current one. Showing the overlay is
immediate, with the fade flag set on the next render pass; hiding clears
the fade flag at once and removes the overlay from the interactive layer
after ``hide_delay``. Each deferred action carries a token, and a timer
whose token is no longer the pending one does nothing, so a late timer
can never undo a newer show.
"""
from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import replace

from shopfront.core.constants import OVERLAY_FADE_IN_DELAY, OVERLAY_HIDE_DELAY
from shopfront.core.scheduler import Scheduler, TimerHandle
from shopfront.domain.surface import (
    OverlayState,
    SurfaceKind,
    SurfaceState,
    TransitionResult,
    TransitionSignal,
)

logger = logging.getLogger(__name__)

Listener = Callable[[TransitionResult], None]


class OverlaySurfaceController:
    """Tracks the active surface and drives the overlay show/hide sequence."""

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        hide_delay: float = OVERLAY_HIDE_DELAY,
        fade_delay: float = OVERLAY_FADE_IN_DELAY,
    ) -> None:
        self._scheduler = scheduler
        self._hide_delay = hide_delay
        self._fade_delay = fade_delay
        self._state = SurfaceState.closed()
        self._overlay = OverlayState()
        self._hide_handle: TimerHandle | None = None
        self._fade_handle: TimerHandle | None = None
        self._tokens = itertools.count(1)
        self._listeners: list[Listener] = []

    # -------------------------
    # Read side
    # -------------------------
    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def overlay(self) -> OverlayState:
        return self._overlay

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    @property
    def pending_timers(self) -> int:
        return sum(handle is not None for handle in (self._hide_handle, self._fade_handle))

    def snapshot(self, signal: TransitionSignal = TransitionSignal.OK, changed: bool = True) -> TransitionResult:
        return TransitionResult(self._state, self._overlay, signal, changed)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Get notified when a timer changes the overlay. Returns an unsubscribe function.

        For library users that animate the overlay. The Telegram front end
        does not subscribe: its message text and keyboard depend only on the
        surface, which timers never change.
        """
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # -------------------------
    # Transitions
    # -------------------------
    def open_cart(self) -> TransitionResult:
        return self._open(SurfaceState.cart())

    def open_item_detail(self, item_id: str) -> TransitionResult:
        return self._open(SurfaceState.item_detail(item_id))

    def open_checkout(self, *, cart_is_empty: bool) -> TransitionResult:
        if cart_is_empty:
            logger.info("Checkout blocked: cart is empty")
            return self.snapshot(TransitionSignal.CHECKOUT_BLOCKED_EMPTY_CART, changed=False)
        return self._open(SurfaceState.checkout())

    def confirm_order(self) -> TransitionResult:
        """Move an open checkout into its order-confirmed sub-state."""
        if self._state.kind is not SurfaceKind.CHECKOUT or self._state.order_confirmed:
            return self.snapshot(changed=False)
        self._state = SurfaceState.checkout(confirmed=True)
        return self.snapshot()

    def close_current(self) -> TransitionResult:
        """Close whatever is open (the overlay click path)."""
        previous = self._state
        self._state = SurfaceState.closed()
        self._hide_overlay()
        logger.debug("Surface %s -> closed", previous)
        return self.snapshot(changed=previous.is_open)

    def close_surface(self, kind: SurfaceKind, item_id: str | None = None) -> TransitionResult:
        """Close request from a specific surface's own control.

        Honoured only when that surface is the active one. A late request
        from a surface that was already superseded leaves the state alone.
        """
        current = self._state
        stale = current.kind is not kind or (
            kind is SurfaceKind.ITEM_DETAIL and item_id is not None and current.item_id != item_id
        )
        if stale:
            logger.debug("Ignoring stale close for %s while %s is active", kind.value, current)
            return self.snapshot(TransitionSignal.STALE_CLOSE_IGNORED, changed=False)
        return self.close_current()

    def _open(self, new_state: SurfaceState) -> TransitionResult:
        previous = self._state
        self._state = new_state
        self._show_overlay()
        logger.debug("Surface %s -> %s", previous, new_state)
        return self.snapshot(changed=previous != new_state)

    # -------------------------
    # Overlay sequence
    # -------------------------
    def _show_overlay(self) -> None:
        self._cancel_hide()
        if not self._overlay.shown and self._overlay.pending_fade is None:
            token = next(self._tokens)
            self._fade_handle = self._scheduler.call_later(
                self._fade_delay, lambda: self._on_fade_timer(token)
            )
            self._overlay = replace(self._overlay, mounted=True, pending_fade=token)
        else:
            self._overlay = replace(self._overlay, mounted=True)

    def _hide_overlay(self) -> None:
        self._cancel_fade()
        self._overlay = replace(self._overlay, shown=False)
        if not self._overlay.mounted:
            return
        # a second hide supersedes the first one's timer
        self._cancel_hide()
        token = next(self._tokens)
        self._hide_handle = self._scheduler.call_later(
            self._hide_delay, lambda: self._on_hide_timer(token)
        )
        self._overlay = replace(self._overlay, pending_hide=token)

    def _cancel_hide(self) -> None:
        if self._hide_handle is not None:
            self._hide_handle.cancel()
            self._hide_handle = None
        self._overlay = replace(self._overlay, pending_hide=None)

    def _cancel_fade(self) -> None:
        if self._fade_handle is not None:
            self._fade_handle.cancel()
            self._fade_handle = None
        self._overlay = replace(self._overlay, pending_fade=None)

    def _on_fade_timer(self, token: int) -> None:
        if self._overlay.pending_fade != token:
            logger.debug("Fade-in timer %s superseded", token)
            return
        self._fade_handle = None
        self._overlay = replace(self._overlay, shown=self._state.is_open, pending_fade=None)
        self._notify()

    def _on_hide_timer(self, token: int) -> None:
        if self._overlay.pending_hide != token:
            logger.debug("Hide timer %s superseded", token)
            return
        self._hide_handle = None
        if self._state.is_open:
            self._overlay = replace(self._overlay, pending_hide=None)
            return
        self._overlay = OverlayState()
        logger.debug("Overlay removed from interactive layer")
        self._notify()

    def _notify(self) -> None:
        result = self.snapshot()
        for listener in list(self._listeners):
            listener(result)
