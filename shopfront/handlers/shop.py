"""Shop browsing, cart and surface handlers.

Every inline button maps to one session command. After the command the
shop message is re-rendered from the fresh view.
"""
from __future__ import annotations

import asyncio
import logging

from aiogram import F, Router, types
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandStart, StateFilter
from aiogram.fsm.context import FSMContext

from shopfront.domain.surface import SurfaceKind
from shopfront.services import shop_session as cmd
from shopfront.services.catalog_filter import parse_category
from shopfront.services.shop_session import DispatchOutcome, ShopSession, ShopSignal

from . import common
from .presenters import (
    ACTION_ADD,
    ACTION_ADD_FROM_DETAIL,
    ACTION_CART,
    ACTION_CATEGORY,
    ACTION_CHECKOUT,
    ACTION_CLOSE,
    ACTION_CLOSE_SURFACE,
    ACTION_DEC,
    ACTION_DONE,
    ACTION_HOME,
    ACTION_INC,
    ACTION_ITEM,
    ACTION_NOOP,
    ACTION_REMOVE,
    ACTION_SHOP_NOW,
    build_view_keyboard,
    build_view_text,
    parse_callback_data,
    signal_message,
)
from .states import FIELD_PROMPTS, CheckoutFlow

logger = logging.getLogger(__name__)

# Strong references to renders started from timer callbacks
_render_tasks: set[asyncio.Task] = set()


def _session_for(user: types.User | None) -> ShopSession | None:
    if common.registry is None or user is None:
        return None
    return common.registry.get(user.id)


def command_for_callback(action: str, args: list[str]) -> cmd.Command | None:
    """Translate a callback action into a session command."""
    arg = args[0] if args else ""
    if action == ACTION_CART:
        return cmd.OpenCart()
    if action == ACTION_CLOSE:
        return cmd.CloseCurrent()
    if action == ACTION_CLOSE_SURFACE and arg:
        try:
            kind = SurfaceKind(arg)
        except ValueError:
            return None
        return cmd.CloseSurface(kind, args[1] if len(args) > 1 and args[1] else None)
    if action == ACTION_ITEM and arg:
        return cmd.OpenItemDetail(arg)
    if action in (ACTION_ADD, ACTION_ADD_FROM_DETAIL) and arg:
        return cmd.AddToCart(arg, 1, open_cart=True)
    if action == ACTION_INC and arg:
        return cmd.IncrementLine(arg)
    if action == ACTION_DEC and arg:
        return cmd.DecrementLine(arg)
    if action == ACTION_REMOVE and arg:
        return cmd.RemoveLine(arg)
    if action == ACTION_CATEGORY:
        return cmd.SelectCategory(parse_category(arg))
    if action == ACTION_HOME:
        return cmd.GoHome()
    if action == ACTION_SHOP_NOW:
        return cmd.ShopNow()
    if action == ACTION_CHECKOUT:
        return cmd.OpenCheckout()
    if action == ACTION_DONE:
        return cmd.FinishOrder()
    return None


async def render(message: types.Message, outcome: DispatchOutcome, *, edit: bool) -> None:
    """Show the view in the shop message, editing it in place when possible."""
    text = build_view_text(outcome.view)
    markup = build_view_keyboard(outcome.view).as_markup()
    if edit:
        try:
            await message.edit_text(text, parse_mode="HTML", reply_markup=markup)
            return
        except TelegramBadRequest as exc:
            # "message is not modified" and edits of very old messages
            logger.debug("Shop message edit failed, sending a new one: %s", exc)
            if "not modified" in str(exc):
                return
    await message.answer(text, parse_mode="HTML", reply_markup=markup)


async def sync_checkout_state(outcome: DispatchOutcome, state: FSMContext) -> None:
    """Keep the checkout form FSM in step with the checkout surface."""
    surface = outcome.view.surface
    if surface.kind is SurfaceKind.CHECKOUT and not surface.order_confirmed:
        if await state.get_state() is None:
            await state.set_state(CheckoutFlow.name)
            await state.update_data(checkout={})
        return
    if await state.get_state() is not None:
        await state.clear()


def register(router: Router) -> None:
    """Register shop handlers on the given router."""

    @router.message(CommandStart())
    @router.message(Command("shop"))
    async def show_shop(message: types.Message, state: FSMContext) -> None:
        session = _session_for(message.from_user)
        if session is None:
            await message.answer("Shop is unavailable right now.")
            return
        await state.clear()
        await render(message, DispatchOutcome(session.view()), edit=False)

    @router.message(Command("cart"))
    async def show_cart(message: types.Message, state: FSMContext) -> None:
        session = _session_for(message.from_user)
        if session is None:
            return
        await state.clear()
        outcome = session.dispatch(cmd.OpenCart())
        await render(message, outcome, edit=False)

    @router.callback_query(F.data.startswith("shop:"))
    async def shop_callback(callback: types.CallbackQuery, state: FSMContext) -> None:
        session = _session_for(callback.from_user)
        parsed = parse_callback_data(callback.data)
        if session is None or parsed is None or not isinstance(callback.message, types.Message):
            await callback.answer()
            return

        action, args = parsed
        if action == ACTION_NOOP:
            await callback.answer()
            return

        command = command_for_callback(action, args)
        if command is None:
            logger.warning("Unknown shop callback: %s", callback.data)
            await callback.answer()
            return

        outcome = session.dispatch(command)
        notice = signal_message(outcome.signal)

        if outcome.signal is ShopSignal.CHECKOUT_BLOCKED_EMPTY_CART:
            await callback.answer(notice, show_alert=True)
            return

        await sync_checkout_state(outcome, state)
        await render(callback.message, outcome, edit=True)
        if isinstance(command, cmd.OpenCheckout):
            await callback.message.answer(FIELD_PROMPTS["name"])
        await callback.answer(notice or None)

    @router.message(StateFilter(None), F.text, ~F.text.startswith("/"))
    async def search_text(message: types.Message) -> None:
        session = _session_for(message.from_user)
        if session is None or message.text is None:
            return
        schedule_search(session, message, message.text)


def _on_render_done(task: asyncio.Task) -> None:
    _render_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Deferred shop render failed: %s", exc, exc_info=exc)


def schedule_search(session: ShopSession, message: types.Message, query: str) -> None:
    """Debounce a search and render its result once it applies."""

    def _on_applied(outcome: DispatchOutcome) -> None:
        task = asyncio.create_task(render(message, outcome, edit=False))
        _render_tasks.add(task)
        task.add_done_callback(_on_render_done)

    session.search_debounced(query, on_applied=_on_applied)
