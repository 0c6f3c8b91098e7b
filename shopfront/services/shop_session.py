"""Shop session - command dispatch over the cart store and surface controller.

Every user action is a discrete command applied synchronously. After the
command has fully applied (cart mutation, persistence write, surface
transition) the session builds a fresh ``ShopView`` for the renderer.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from shopfront.core.constants import (
    DEFAULT_CART_STORAGE_KEY,
    OVERLAY_HIDE_DELAY,
    SEARCH_DEBOUNCE_DELAY,
)
from shopfront.core.scheduler import Debouncer, Scheduler
from shopfront.domain.catalog import CatalogItem, CatalogLookup, Category
from shopfront.domain.checkout import OrderConfirmation
from shopfront.domain.surface import (
    OverlayState,
    SurfaceKind,
    SurfaceState,
    TransitionSignal,
)
from shopfront.integrations.kv_storage import KeyValueStorage

from .cart_store import CartStore, DetailedCartLine
from .catalog_filter import category_title, filter_catalog
from .checkout_service import CheckoutService, CheckoutStatus
from .overlay_controller import OverlaySurfaceController

logger = logging.getLogger(__name__)


class ShopSignal(str, Enum):
    """Non-exception outcomes reported to the UI."""

    OK = "ok"
    CHECKOUT_BLOCKED_EMPTY_CART = "checkout_blocked_empty_cart"
    CHECKOUT_VALIDATION_FAILED = "checkout_validation_failed"
    STALE_CLOSE_IGNORED = "stale_close_ignored"
    ORDER_CONFIRMED = "order_confirmed"


_TRANSITION_SIGNALS = {
    TransitionSignal.OK: ShopSignal.OK,
    TransitionSignal.CHECKOUT_BLOCKED_EMPTY_CART: ShopSignal.CHECKOUT_BLOCKED_EMPTY_CART,
    TransitionSignal.STALE_CLOSE_IGNORED: ShopSignal.STALE_CLOSE_IGNORED,
}


# =============================================================================
# COMMANDS
# =============================================================================


@dataclass(frozen=True)
class OpenCart:
    pass


@dataclass(frozen=True)
class CloseCurrent:
    pass


@dataclass(frozen=True)
class CloseSurface:
    kind: SurfaceKind
    item_id: str | None = None


@dataclass(frozen=True)
class OpenItemDetail:
    item_id: str


@dataclass(frozen=True)
class OpenCheckout:
    pass


@dataclass(frozen=True)
class AddToCart:
    item_id: str
    quantity: int = 1
    open_cart: bool = False


@dataclass(frozen=True)
class SetQuantity:
    item_id: str
    quantity: int


@dataclass(frozen=True)
class IncrementLine:
    item_id: str


@dataclass(frozen=True)
class DecrementLine:
    item_id: str


@dataclass(frozen=True)
class RemoveLine:
    item_id: str


@dataclass(frozen=True)
class SelectCategory:
    category: Category | None


@dataclass(frozen=True)
class Search:
    query: str


@dataclass(frozen=True)
class GoHome:
    pass


@dataclass(frozen=True)
class ShopNow:
    """Empty-cart call to action: close the cart and show everything."""


@dataclass(frozen=True)
class SubmitCheckout:
    name: str
    email: str
    address: str


@dataclass(frozen=True)
class FinishOrder:
    pass


Command = (
    OpenCart
    | CloseCurrent
    | CloseSurface
    | OpenItemDetail
    | OpenCheckout
    | AddToCart
    | SetQuantity
    | IncrementLine
    | DecrementLine
    | RemoveLine
    | SelectCategory
    | Search
    | GoHome
    | ShopNow
    | SubmitCheckout
    | FinishOrder
)


# =============================================================================
# VIEW
# =============================================================================


@dataclass(frozen=True)
class ShopView:
    """Everything the renderer needs after a command."""

    heading: str
    items: list[CatalogItem]
    category: Category | None
    query: str
    cart_lines: list[DetailedCartLine]
    subtotal: Decimal
    total_quantity: int
    surface: SurfaceState
    overlay: OverlayState
    detail_item: CatalogItem | None = None
    confirmation: OrderConfirmation | None = None
    cart_saved: bool = True

    @property
    def overlay_visible(self) -> bool:
        return self.surface.is_open

    @property
    def cart_is_empty(self) -> bool:
        return not self.cart_lines


@dataclass(frozen=True)
class DispatchOutcome:
    view: ShopView
    signal: ShopSignal = ShopSignal.OK
    errors: dict[str, str] = field(default_factory=dict)


# =============================================================================
# SESSION
# =============================================================================


class ShopSession:
    """One user's shop: cart, surfaces and browsing filters."""

    def __init__(
        self,
        lookup: CatalogLookup,
        cart: CartStore,
        scheduler: Scheduler,
        *,
        hide_delay: float = OVERLAY_HIDE_DELAY,
        search_debounce: float = SEARCH_DEBOUNCE_DELAY,
    ) -> None:
        self.lookup = lookup
        self.cart = cart
        self.surfaces = OverlaySurfaceController(scheduler, hide_delay=hide_delay)
        self.checkout = CheckoutService(cart, lookup)
        self._search_debouncer = Debouncer(scheduler, search_debounce)
        self.category: Category | None = None
        self.query = ""
        self.confirmation: OrderConfirmation | None = None

        self._handlers: dict[type, Callable[[Any], DispatchOutcome | None]] = {
            OpenCart: self._open_cart,
            CloseCurrent: self._close_current,
            CloseSurface: self._close_surface,
            OpenItemDetail: self._open_item_detail,
            OpenCheckout: self._open_checkout,
            AddToCart: self._add_to_cart,
            SetQuantity: self._set_quantity,
            IncrementLine: self._increment_line,
            DecrementLine: self._decrement_line,
            RemoveLine: self._remove_line,
            SelectCategory: self._select_category,
            Search: self._search,
            GoHome: self._go_home,
            ShopNow: self._shop_now,
            SubmitCheckout: self._submit_checkout,
            FinishOrder: self._finish_order,
        }

    # -------------------------
    # Entry points
    # -------------------------
    def dispatch(self, command: Command) -> DispatchOutcome:
        handler = self._handlers.get(type(command))
        if handler is None:
            raise TypeError(f"Unsupported command: {command!r}")
        logger.debug("Dispatch %r", command)
        outcome = handler(command)
        return outcome if outcome is not None else DispatchOutcome(self.view())

    def search_debounced(self, query: str, on_applied: Callable[[DispatchOutcome], Any] | None = None) -> None:
        """Re-run the filter once typing settles; newer calls cancel older ones."""

        def _apply() -> None:
            outcome = self.dispatch(Search(query))
            if on_applied is not None:
                on_applied(outcome)

        self._search_debouncer.call(_apply)

    def view(self) -> ShopView:
        state = self.surfaces.state
        detail_item = None
        if state.kind is SurfaceKind.ITEM_DETAIL and state.item_id is not None:
            detail_item = self.lookup.get(state.item_id)
        return ShopView(
            heading=category_title(self.category),
            items=filter_catalog(self.lookup, self.category, self.query),
            category=self.category,
            query=self.query,
            cart_lines=self.cart.detailed_lines(self.lookup),
            subtotal=self.cart.subtotal(self.lookup),
            total_quantity=self.cart.total_quantity(),
            surface=state,
            overlay=self.surfaces.overlay,
            detail_item=detail_item,
            confirmation=self.confirmation if state.order_confirmed else None,
            cart_saved=self.cart.last_save_ok,
        )

    # -------------------------
    # Surfaces
    # -------------------------
    def _from_transition(self, signal: TransitionSignal) -> DispatchOutcome:
        return DispatchOutcome(self.view(), _TRANSITION_SIGNALS[signal])

    def _open_cart(self, _: OpenCart) -> DispatchOutcome:
        return self._from_transition(self.surfaces.open_cart().signal)

    def _close_current(self, _: CloseCurrent) -> DispatchOutcome:
        return self._from_transition(self.surfaces.close_current().signal)

    def _close_surface(self, command: CloseSurface) -> DispatchOutcome:
        result = self.surfaces.close_surface(command.kind, command.item_id)
        return self._from_transition(result.signal)

    def _open_item_detail(self, command: OpenItemDetail) -> DispatchOutcome:
        if command.item_id not in self.lookup:
            logger.warning("Item detail requested for unknown id %s", command.item_id)
        return self._from_transition(self.surfaces.open_item_detail(command.item_id).signal)

    def _open_checkout(self, _: OpenCheckout) -> DispatchOutcome:
        result = self.surfaces.open_checkout(cart_is_empty=self.cart.is_empty())
        return self._from_transition(result.signal)

    # -------------------------
    # Cart
    # -------------------------
    def _add_to_cart(self, command: AddToCart) -> None:
        self.cart.add(command.item_id, command.quantity)
        if command.open_cart:
            self.surfaces.open_cart()

    def _set_quantity(self, command: SetQuantity) -> None:
        self.cart.set_quantity(command.item_id, command.quantity)

    def _increment_line(self, command: IncrementLine) -> None:
        self.cart.add(command.item_id, 1)

    def _decrement_line(self, command: DecrementLine) -> None:
        self.cart.decrement(command.item_id)

    def _remove_line(self, command: RemoveLine) -> None:
        self.cart.remove(command.item_id)

    # -------------------------
    # Browsing
    # -------------------------
    def _select_category(self, command: SelectCategory) -> None:
        self.category = command.category

    def _search(self, command: Search) -> None:
        self.query = command.query.strip()

    def _reset_filters(self) -> None:
        self._search_debouncer.cancel()
        self.category = None
        self.query = ""

    def _go_home(self, _: GoHome) -> None:
        self._reset_filters()

    def _shop_now(self, _: ShopNow) -> DispatchOutcome:
        result = self.surfaces.close_surface(SurfaceKind.CART)
        self._reset_filters()
        return self._from_transition(result.signal)

    # -------------------------
    # Checkout
    # -------------------------
    def _submit_checkout(self, command: SubmitCheckout) -> DispatchOutcome:
        if self.cart.is_empty():
            return DispatchOutcome(self.view(), ShopSignal.CHECKOUT_BLOCKED_EMPTY_CART)

        result = self.checkout.submit(
            {"name": command.name, "email": command.email, "address": command.address}
        )
        if result.status is CheckoutStatus.VALIDATION_FAILED:
            return DispatchOutcome(self.view(), ShopSignal.CHECKOUT_VALIDATION_FAILED, result.errors)
        if result.status is CheckoutStatus.EMPTY_CART:
            return DispatchOutcome(self.view(), ShopSignal.CHECKOUT_BLOCKED_EMPTY_CART)

        # the cart is already cleared here, so the open is not gated on it
        if self.surfaces.state.kind is not SurfaceKind.CHECKOUT:
            self.surfaces.open_checkout(cart_is_empty=False)
        self.confirmation = result.confirmation
        self.surfaces.confirm_order()
        return DispatchOutcome(self.view(), ShopSignal.ORDER_CONFIRMED)

    def _finish_order(self, _: FinishOrder) -> DispatchOutcome:
        result = self.surfaces.close_surface(SurfaceKind.CHECKOUT)
        if result.signal is TransitionSignal.OK:
            self.confirmation = None
            self._reset_filters()
        return self._from_transition(result.signal)


class SessionRegistry:
    """One shop session per user, each with its own cart storage key."""

    def __init__(
        self,
        lookup: CatalogLookup,
        storage: KeyValueStorage,
        scheduler: Scheduler,
        *,
        base_key: str = DEFAULT_CART_STORAGE_KEY,
        hide_delay: float = OVERLAY_HIDE_DELAY,
        search_debounce: float = SEARCH_DEBOUNCE_DELAY,
    ) -> None:
        self.lookup = lookup
        self.storage = storage
        self.scheduler = scheduler
        self.base_key = base_key
        self.hide_delay = hide_delay
        self.search_debounce = search_debounce
        self._sessions: dict[int, ShopSession] = {}

    def storage_key(self, user_id: int) -> str:
        return f"{self.base_key}:{int(user_id)}"

    def get(self, user_id: int) -> ShopSession:
        session = self._sessions.get(user_id)
        if session is None:
            cart = CartStore(self.storage, self.storage_key(user_id))
            session = ShopSession(
                self.lookup,
                cart,
                self.scheduler,
                hide_delay=self.hide_delay,
                search_debounce=self.search_debounce,
            )
            self._sessions[user_id] = session
            logger.info("Started shop session for user %s", user_id)
        return session

    def __len__(self) -> int:
        return len(self._sessions)
