"""Service layer: cart, catalog filter, surface controller, checkout and sessions."""

from .cart_store import CartLine, CartStore, CartTotals, DetailedCartLine
from .catalog_filter import category_title, filter_catalog, parse_category
from .checkout_service import CheckoutResult, CheckoutService, CheckoutStatus
from .overlay_controller import OverlaySurfaceController
from .shop_session import (
    DispatchOutcome,
    SessionRegistry,
    ShopSession,
    ShopSignal,
    ShopView,
)

__all__ = [
    "CartLine",
    "CartStore",
    "CartTotals",
    "DetailedCartLine",
    "filter_catalog",
    "parse_category",
    "category_title",
    "CheckoutService",
    "CheckoutResult",
    "CheckoutStatus",
    "OverlaySurfaceController",
    "ShopSession",
    "SessionRegistry",
    "ShopSignal",
    "ShopView",
    "DispatchOutcome",
]
