"""FSM states for the checkout form."""
from __future__ import annotations

from aiogram.fsm.state import State, StatesGroup


class CheckoutFlow(StatesGroup):
    """Checkout form fields, asked one message at a time."""

    name = State()
    email = State()
    address = State()


FIELD_STATES = {
    "name": CheckoutFlow.name,
    "email": CheckoutFlow.email,
    "address": CheckoutFlow.address,
}

FIELD_PROMPTS = {
    "name": "Your full name:",
    "email": "Your email address:",
    "address": "Delivery address:",
}
