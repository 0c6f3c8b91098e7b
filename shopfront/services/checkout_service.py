"""Simulated checkout: validate customer details, confirm the order, empty the cart."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from shopfront.core.exceptions import ValidationException
from shopfront.domain.catalog import CatalogLookup
from shopfront.domain.checkout import OrderConfirmation, new_order_id, parse_checkout_form

from .cart_store import CartStore

logger = logging.getLogger(__name__)


class CheckoutStatus(str, Enum):
    CONFIRMED = "confirmed"
    EMPTY_CART = "empty_cart"
    VALIDATION_FAILED = "validation_failed"


@dataclass(frozen=True)
class CheckoutResult:
    status: CheckoutStatus
    confirmation: OrderConfirmation | None = None
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is CheckoutStatus.CONFIRMED


class CheckoutService:
    """Checkout submission boundary. No network: orders are confirmed locally."""

    def __init__(self, cart: CartStore, lookup: CatalogLookup):
        self.cart = cart
        self.lookup = lookup

    def submit(self, form_data: dict[str, Any]) -> CheckoutResult:
        if self.cart.is_empty():
            return CheckoutResult(CheckoutStatus.EMPTY_CART)

        try:
            form = parse_checkout_form(form_data)
        except ValidationException as exc:
            logger.info("Checkout validation failed: %s", ", ".join(sorted(exc.errors)))
            return CheckoutResult(CheckoutStatus.VALIDATION_FAILED, errors=exc.errors)

        confirmation = OrderConfirmation(
            order_id=new_order_id(),
            name=form.name,
            email=form.email,
            address=form.address,
            item_count=self.cart.total_quantity(),
            total=self.cart.subtotal(self.lookup),
        )
        self.cart.clear()
        logger.info(
            "Order %s confirmed: %s items, total %s",
            confirmation.order_id,
            confirmation.item_count,
            confirmation.total,
        )
        return CheckoutResult(CheckoutStatus.CONFIRMED, confirmation=confirmation)
