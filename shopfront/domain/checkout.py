"""Checkout form and order confirmation models."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from shopfront.core.constants import ORDER_ID_PREFIX
from shopfront.core.exceptions import ValidationException

REQUIRED_FIELDS = ("name", "email", "address")


class CheckoutForm(BaseModel):
    """Customer details collected by the checkout panel."""

    name: str
    email: str
    address: str

    @field_validator("name", "email", "address", mode="before")
    @classmethod
    def strip_and_require(cls, v: Any) -> str:
        value = "" if v is None else str(v).strip()
        if not value:
            raise ValueError("This field is required")
        return value


def parse_checkout_form(data: dict[str, Any]) -> CheckoutForm:
    """Build a form from raw field values.

    Raises:
        ValidationException: with one message per failing field.
    """
    payload = {name: data.get(name) for name in REQUIRED_FIELDS}
    try:
        return CheckoutForm(**payload)
    except ValidationError as exc:
        errors: dict[str, str] = {}
        for error in exc.errors():
            loc = error.get("loc") or ("form",)
            message = str(error.get("msg", "Invalid value"))
            errors.setdefault(str(loc[0]), message.removeprefix("Value error, "))
        raise ValidationException("Checkout validation failed", errors) from exc


def new_order_id() -> str:
    return f"{ORDER_ID_PREFIX}_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class OrderConfirmation:
    """Simulated order receipt."""

    order_id: str
    name: str
    email: str
    address: str
    item_count: int
    total: Decimal
    created_at: datetime = field(default_factory=datetime.now)
