"""Surface and overlay value objects (single source of truth for UI state)."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SurfaceKind(str, Enum):
    """Which surface is active. Exactly one at a time."""

    CLOSED = "closed"
    CART = "cart"
    ITEM_DETAIL = "item_detail"
    CHECKOUT = "checkout"


class TransitionSignal(str, Enum):
    """Outcome of a surface transition request."""

    OK = "ok"
    CHECKOUT_BLOCKED_EMPTY_CART = "checkout_blocked_empty_cart"
    STALE_CLOSE_IGNORED = "stale_close_ignored"


@dataclass(frozen=True, slots=True)
class SurfaceState:
    kind: SurfaceKind = SurfaceKind.CLOSED
    item_id: str | None = None
    order_confirmed: bool = False

    @classmethod
    def closed(cls) -> SurfaceState:
        return cls()

    @classmethod
    def cart(cls) -> SurfaceState:
        return cls(SurfaceKind.CART)

    @classmethod
    def item_detail(cls, item_id: str) -> SurfaceState:
        return cls(SurfaceKind.ITEM_DETAIL, item_id=item_id)

    @classmethod
    def checkout(cls, *, confirmed: bool = False) -> SurfaceState:
        return cls(SurfaceKind.CHECKOUT, order_confirmed=confirmed)

    @property
    def is_open(self) -> bool:
        return self.kind is not SurfaceKind.CLOSED

    def __str__(self) -> str:
        if self.kind is SurfaceKind.ITEM_DETAIL:
            return f"{self.kind.value}({self.item_id})"
        if self.kind is SurfaceKind.CHECKOUT and self.order_confirmed:
            return f"{self.kind.value}(confirmed)"
        return self.kind.value


@dataclass(frozen=True, slots=True)
class OverlayState:
    """Snapshot of the shared overlay.

    ``mounted`` means the overlay sits in the interactive layer, ``shown``
    is the cosmetic fade flag. The pending tokens identify the single
    outstanding timer of each kind; a timer whose token no longer matches
    does nothing when it fires.
    """

    mounted: bool = False
    shown: bool = False
    pending_hide: int | None = None
    pending_fade: int | None = None

    @property
    def hiding(self) -> bool:
        return self.pending_hide is not None


@dataclass(frozen=True, slots=True)
class TransitionResult:
    state: SurfaceState
    overlay: OverlayState
    signal: TransitionSignal = TransitionSignal.OK
    changed: bool = True

    @property
    def visible(self) -> bool:
        """Overlay visibility is derived from the surface, never set directly."""
        return self.state.is_open
