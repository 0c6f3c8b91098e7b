"""Domain package."""

from .catalog import CatalogItem, CatalogLookup, Category
from .catalog_data import DEFAULT_CATALOG, default_lookup
from .checkout import CheckoutForm, OrderConfirmation, parse_checkout_form
from .surface import (
    OverlayState,
    SurfaceKind,
    SurfaceState,
    TransitionResult,
    TransitionSignal,
)

__all__ = [
    # Entities
    "CatalogItem",
    "CatalogLookup",
    "CheckoutForm",
    "OrderConfirmation",
    # Value Objects
    "Category",
    "SurfaceKind",
    "SurfaceState",
    "OverlayState",
    "TransitionResult",
    "TransitionSignal",
    # Data
    "DEFAULT_CATALOG",
    "default_lookup",
    "parse_checkout_form",
]
