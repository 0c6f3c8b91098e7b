"""Checkout form handlers: collect name, email and address, then submit."""
from __future__ import annotations

import logging

from aiogram import F, Router, types
from aiogram.fsm.context import FSMContext

from shopfront.services import shop_session as cmd
from shopfront.services.shop_session import ShopSignal

from . import common
from .presenters import signal_message
from .shop import render
from .states import FIELD_PROMPTS, FIELD_STATES, CheckoutFlow

logger = logging.getLogger(__name__)

FIELD_ORDER = ("name", "email", "address")


def _next_field(data: dict[str, str]) -> str | None:
    for field_name in FIELD_ORDER:
        if not data.get(field_name):
            return field_name
    return None


def register(router: Router) -> None:
    """Register checkout form handlers on the given router."""

    @router.message(CheckoutFlow.name, F.text)
    @router.message(CheckoutFlow.email, F.text)
    @router.message(CheckoutFlow.address, F.text)
    async def checkout_field(message: types.Message, state: FSMContext) -> None:
        if common.registry is None or message.from_user is None:
            await state.clear()
            return
        session = common.registry.get(message.from_user.id)

        current = await state.get_state()
        field_name = next((name for name, st in FIELD_STATES.items() if st.state == current), None)
        if field_name is None:
            await state.clear()
            return

        data = await state.get_data()
        form: dict[str, str] = dict(data.get("checkout") or {})
        form[field_name] = (message.text or "").strip()
        await state.update_data(checkout=form)

        missing = _next_field(form)
        if missing is not None:
            await state.set_state(FIELD_STATES[missing])
            await message.answer(FIELD_PROMPTS[missing])
            return

        outcome = session.dispatch(
            cmd.SubmitCheckout(name=form["name"], email=form["email"], address=form["address"])
        )

        if outcome.signal is ShopSignal.CHECKOUT_VALIDATION_FAILED:
            for bad_field in outcome.errors:
                form.pop(bad_field, None)
            await state.update_data(checkout=form)
            retry = _next_field(form) or FIELD_ORDER[0]
            await state.set_state(FIELD_STATES[retry])
            details = "\n".join(f"• {name}: {error}" for name, error in outcome.errors.items())
            await message.answer(f"{signal_message(outcome.signal)}\n{details}\n\n{FIELD_PROMPTS[retry]}")
            return

        await state.clear()
        if outcome.signal is ShopSignal.CHECKOUT_BLOCKED_EMPTY_CART:
            await message.answer(signal_message(outcome.signal) or "")
        await render(message, outcome, edit=False)
