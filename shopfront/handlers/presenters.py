"""
Shop UI components - message text builders and keyboards.

Each builder takes a ``ShopView`` and renders the active surface; when no
surface is open the catalog page is shown.
"""
from __future__ import annotations

from aiogram.types import InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder

from shopfront.domain.catalog import Category
from shopfront.domain.surface import SurfaceKind
from shopfront.services.shop_session import ShopSignal, ShopView

from .common import esc, format_price

CALLBACK_PREFIX = "shop"

# Callback actions
ACTION_CART = "cart"
ACTION_CLOSE = "close"  # overlay click: close whatever is open
ACTION_CLOSE_SURFACE = "close_surface"
ACTION_ITEM = "item"
ACTION_ADD = "add"
ACTION_ADD_FROM_DETAIL = "add_detail"
ACTION_INC = "inc"
ACTION_DEC = "dec"
ACTION_REMOVE = "rm"
ACTION_CATEGORY = "cat"
ACTION_HOME = "home"
ACTION_SHOP_NOW = "shop_now"
ACTION_CHECKOUT = "checkout"
ACTION_DONE = "done"
ACTION_NOOP = "noop"

ALL_CATEGORIES = "all"

SIGNAL_MESSAGES = {
    ShopSignal.CHECKOUT_BLOCKED_EMPTY_CART: "Your cart is empty. Add items before checkout.",
    ShopSignal.CHECKOUT_VALIDATION_FAILED: "Please fill all fields.",
    ShopSignal.STALE_CLOSE_IGNORED: "That panel is already closed.",
}


def callback_data(action: str, *args: str) -> str:
    return ":".join((CALLBACK_PREFIX, action, *args))


def parse_callback_data(data: str | None) -> tuple[str, list[str]] | None:
    """Split ``shop:<action>:<arg>...``; returns None for foreign data."""
    if not data:
        return None
    parts = data.split(":")
    if len(parts) < 2 or parts[0] != CALLBACK_PREFIX:
        return None
    return parts[1], parts[2:]


def signal_message(signal: ShopSignal) -> str | None:
    return SIGNAL_MESSAGES.get(signal)


# =============================================================================
# TEXT
# =============================================================================


def build_catalog_text(view: ShopView) -> str:
    text_parts = [f"<b>{esc(view.heading)}</b>"]
    if view.query:
        text_parts.append(f"Search: <i>{esc(view.query)}</i>")
    text_parts.append("")

    if not view.items:
        text_parts.append("No items match your filters.")
    for item in view.items:
        category = item.category.label if item.category else ""
        text_parts.append(f"• <b>{esc(item.title)}</b> — {format_price(item.price)} <i>{esc(category)}</i>")

    return "\n".join(text_parts)


def build_cart_text(view: ShopView) -> str:
    if view.cart_is_empty:
        return "🛒 <b>Cart</b>\n\nYour cart is empty."

    lines = ["🛒 <b>Cart</b>", ""]
    for i, line in enumerate(view.cart_lines, 1):
        lines.append(f"<b>{i}. {esc(line.item.title)}</b>")
        lines.append(f"   {line.quantity} × {format_price(line.item.price)} = <b>{format_price(line.line_total)}</b>")

    lines.append("─" * 25)
    lines.append(f"Subtotal: <b>{format_price(view.subtotal)}</b>")
    if not view.cart_saved:
        lines.append("")
        lines.append("⚠️ Your cart could not be saved and will be lost on restart.")
    return "\n".join(lines)


def build_item_detail_text(view: ShopView) -> str:
    item = view.detail_item
    if item is None:
        return "This item is no longer available."

    text_parts = [f"<b>{esc(item.title)}</b>"]
    if item.category:
        text_parts.append(f"<i>{esc(item.category.label)}</i>")
    text_parts.append("")
    text_parts.append(f"<b>{format_price(item.price)}</b>")
    if item.description:
        text_parts.append(esc(item.description))
    if item.image:
        text_parts.append(f'<a href="{esc(item.image)}">Photo</a>')
    return "\n".join(text_parts)


def build_checkout_text(view: ShopView) -> str:
    confirmation = view.confirmation
    if view.surface.order_confirmed and confirmation is not None:
        return (
            "✅ <b>Order placed!</b>\n\n"
            f"Order: <code>{esc(confirmation.order_id)}</code>\n"
            f"Items: {confirmation.item_count}\n"
            f"Total: <b>{format_price(confirmation.total)}</b>\n\n"
            f"A confirmation was sent to {esc(confirmation.email)}."
        )
    return (
        "💳 <b>Checkout</b>\n\n"
        f"Total: <b>{format_price(view.subtotal)}</b>\n\n"
        "Reply with your name, email and address, one message each."
    )


def build_view_text(view: ShopView) -> str:
    kind = view.surface.kind
    if kind is SurfaceKind.CART:
        return build_cart_text(view)
    if kind is SurfaceKind.ITEM_DETAIL:
        return build_item_detail_text(view)
    if kind is SurfaceKind.CHECKOUT:
        return build_checkout_text(view)
    return build_catalog_text(view)


# =============================================================================
# KEYBOARDS
# =============================================================================


def _cart_button_text(view: ShopView) -> str:
    return f"🛒 Cart ({view.total_quantity})" if view.total_quantity else "🛒 Cart"


def build_catalog_keyboard(view: ShopView) -> InlineKeyboardBuilder:
    kb = InlineKeyboardBuilder()
    sizes: list[int] = []

    active = view.category.value if view.category else ALL_CATEGORIES
    kb.button(
        text=("• All" if active == ALL_CATEGORIES else "All"),
        callback_data=callback_data(ACTION_CATEGORY, ALL_CATEGORIES),
    )
    for category in Category:
        label = f"• {category.label}" if active == category.value else category.label
        kb.button(text=label, callback_data=callback_data(ACTION_CATEGORY, category.value))
    sizes.append(3)
    sizes.append(3)

    for item in view.items:
        kb.button(text=item.title, callback_data=callback_data(ACTION_ITEM, item.id))
        kb.button(text="Add", callback_data=callback_data(ACTION_ADD, item.id))
        sizes.append(2)

    kb.button(text=_cart_button_text(view), callback_data=callback_data(ACTION_CART))
    kb.button(text="🏠 Home", callback_data=callback_data(ACTION_HOME))
    sizes.append(2)

    kb.adjust(*sizes)
    return kb


def build_cart_keyboard(view: ShopView) -> InlineKeyboardBuilder:
    kb = InlineKeyboardBuilder()
    sizes: list[int] = []

    if view.cart_is_empty:
        kb.button(text="Shop now", callback_data=callback_data(ACTION_SHOP_NOW))
        sizes.append(1)
    for line in view.cart_lines:
        kb.button(text="-", callback_data=callback_data(ACTION_DEC, line.id))
        kb.button(text=str(line.quantity), callback_data=callback_data(ACTION_NOOP))
        kb.button(text="+", callback_data=callback_data(ACTION_INC, line.id))
        kb.button(text="Remove", callback_data=callback_data(ACTION_REMOVE, line.id))
        sizes.append(4)

    if not view.cart_is_empty:
        kb.button(text="💳 Checkout", callback_data=callback_data(ACTION_CHECKOUT))
        sizes.append(1)
    kb.button(text="✖ Close", callback_data=callback_data(ACTION_CLOSE_SURFACE, SurfaceKind.CART.value))
    sizes.append(1)

    kb.adjust(*sizes)
    return kb


def build_item_detail_keyboard(view: ShopView) -> InlineKeyboardBuilder:
    kb = InlineKeyboardBuilder()
    item_id = view.surface.item_id or ""
    kb.button(
        text="← Back",
        callback_data=callback_data(ACTION_CLOSE_SURFACE, SurfaceKind.ITEM_DETAIL.value, item_id),
    )
    if view.detail_item is not None:
        kb.button(text="Add to cart", callback_data=callback_data(ACTION_ADD_FROM_DETAIL, item_id))
    kb.adjust(2)
    return kb


def build_checkout_keyboard(view: ShopView) -> InlineKeyboardBuilder:
    kb = InlineKeyboardBuilder()
    if view.surface.order_confirmed:
        kb.button(text="Done", callback_data=callback_data(ACTION_DONE))
    else:
        kb.button(
            text="Cancel",
            callback_data=callback_data(ACTION_CLOSE_SURFACE, SurfaceKind.CHECKOUT.value),
        )
    kb.adjust(1)
    return kb


def build_view_keyboard(view: ShopView) -> InlineKeyboardBuilder:
    kind = view.surface.kind
    if kind is SurfaceKind.CART:
        kb = build_cart_keyboard(view)
    elif kind is SurfaceKind.ITEM_DETAIL:
        kb = build_item_detail_keyboard(view)
    elif kind is SurfaceKind.CHECKOUT:
        kb = build_checkout_keyboard(view)
    else:
        return build_catalog_keyboard(view)
    # shared overlay: one control that closes whatever is open
    kb.row(InlineKeyboardButton(text="⬛ Back to shop", callback_data=callback_data(ACTION_CLOSE)))
    return kb
