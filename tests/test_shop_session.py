from __future__ import annotations

from decimal import Decimal

import pytest

from shopfront.domain.catalog import Category
from shopfront.domain.surface import SurfaceKind
from shopfront.integrations.kv_storage import MemoryKeyValueStorage
from shopfront.services import shop_session as cmd
from shopfront.services.shop_session import SessionRegistry, ShopSession, ShopSignal

from conftest import ManualScheduler


def test_initial_view_shows_full_catalog(session: ShopSession) -> None:
    view = session.view()

    assert view.heading == "All items"
    assert len(view.items) == 10
    assert view.surface.kind is SurfaceKind.CLOSED
    assert not view.overlay_visible
    assert view.total_quantity == 0
    assert view.subtotal == Decimal("0")


def test_add_from_card_opens_cart(session: ShopSession) -> None:
    outcome = session.dispatch(cmd.AddToCart("3", open_cart=True))

    assert outcome.view.surface.kind is SurfaceKind.CART
    assert outcome.view.total_quantity == 1
    assert outcome.view.cart_lines[0].item.title == "White Tee"


def test_add_from_detail_supersedes_detail_with_cart(session: ShopSession) -> None:
    session.dispatch(cmd.OpenItemDetail("4"))
    outcome = session.dispatch(cmd.AddToCart("4", open_cart=True))

    assert outcome.view.surface.kind is SurfaceKind.CART
    # the detail panel's own back button arrives late
    late = session.dispatch(cmd.CloseSurface(SurfaceKind.ITEM_DETAIL, "4"))
    assert late.signal is ShopSignal.STALE_CLOSE_IGNORED
    assert late.view.surface.kind is SurfaceKind.CART


def test_item_detail_view_resolves_item(session: ShopSession) -> None:
    view = session.dispatch(cmd.OpenItemDetail("9")).view
    assert view.detail_item is not None
    assert view.detail_item.title == "Business Suit"


def test_unknown_item_detail_still_opens(session: ShopSession) -> None:
    view = session.dispatch(cmd.OpenItemDetail("404")).view
    assert view.surface.kind is SurfaceKind.ITEM_DETAIL
    assert view.detail_item is None


def test_cart_line_controls(session: ShopSession) -> None:
    session.dispatch(cmd.AddToCart("1"))
    session.dispatch(cmd.IncrementLine("1"))
    view = session.dispatch(cmd.DecrementLine("1")).view
    assert view.total_quantity == 1

    view = session.dispatch(cmd.SetQuantity("1", 5)).view
    assert view.total_quantity == 5

    view = session.dispatch(cmd.RemoveLine("1")).view
    assert view.cart_is_empty


def test_checkout_with_empty_cart_is_blocked(session: ShopSession, scheduler: ManualScheduler) -> None:
    outcome = session.dispatch(cmd.OpenCheckout())

    assert outcome.signal is ShopSignal.CHECKOUT_BLOCKED_EMPTY_CART
    assert outcome.view.surface.kind is SurfaceKind.CLOSED
    assert not outcome.view.overlay.mounted
    assert scheduler.pending == 0


def test_full_checkout_flow(session: ShopSession, scheduler: ManualScheduler) -> None:
    session.dispatch(cmd.AddToCart("2", 2, open_cart=True))
    session.dispatch(cmd.OpenCheckout())

    failed = session.dispatch(cmd.SubmitCheckout(name="Ada", email="", address="Here"))
    assert failed.signal is ShopSignal.CHECKOUT_VALIDATION_FAILED
    assert "email" in failed.errors
    assert failed.view.total_quantity == 2
    assert failed.view.surface.kind is SurfaceKind.CHECKOUT

    done = session.dispatch(cmd.SubmitCheckout(name="Ada", email="ada@example.com", address="Here"))
    assert done.signal is ShopSignal.ORDER_CONFIRMED
    assert done.view.surface.order_confirmed
    assert done.view.confirmation.total == Decimal("179.98")
    assert done.view.cart_is_empty

    finished = session.dispatch(cmd.FinishOrder())
    assert finished.view.surface.kind is SurfaceKind.CLOSED
    assert finished.view.confirmation is None

    scheduler.advance(1)
    assert not session.view().overlay.mounted


def test_submit_without_open_checkout_opens_it(session: ShopSession) -> None:
    session.dispatch(cmd.AddToCart("1"))
    outcome = session.dispatch(cmd.SubmitCheckout(name="A", email="a@b.c", address="X"))

    assert outcome.signal is ShopSignal.ORDER_CONFIRMED
    assert outcome.view.surface.kind is SurfaceKind.CHECKOUT


def test_invalid_submit_while_closed_changes_nothing(session: ShopSession, scheduler: ManualScheduler) -> None:
    session.dispatch(cmd.AddToCart("1"))
    before = session.view()

    outcome = session.dispatch(cmd.SubmitCheckout(name="", email="a@b.c", address="X"))

    assert outcome.signal is ShopSignal.CHECKOUT_VALIDATION_FAILED
    assert outcome.errors == {"name": "This field is required"}
    assert outcome.view.surface == before.surface
    assert outcome.view.overlay == before.overlay
    assert not outcome.view.overlay.mounted
    assert scheduler.pending == 0
    assert outcome.view.total_quantity == 1


def test_category_and_search_filters(session: ShopSession) -> None:
    view = session.dispatch(cmd.SelectCategory(Category.SHOES)).view
    assert view.heading == "Shoes"
    assert [i.id for i in view.items] == ["1", "2"]

    view = session.dispatch(cmd.Search("  running ")).view
    assert view.query == "running"
    assert [i.id for i in view.items] == ["2"]

    view = session.dispatch(cmd.GoHome()).view
    assert view.category is None and view.query == ""
    assert len(view.items) == 10


def test_shop_now_closes_empty_cart_and_resets(session: ShopSession) -> None:
    session.dispatch(cmd.SelectCategory(Category.SUITS))
    session.dispatch(cmd.OpenCart())

    view = session.dispatch(cmd.ShopNow()).view

    assert view.surface.kind is SurfaceKind.CLOSED
    assert view.category is None


def test_debounced_search_applies_only_last_query(session: ShopSession, scheduler: ManualScheduler) -> None:
    applied = []
    session.search_debounced("s", on_applied=applied.append)
    scheduler.advance(0.1)
    session.search_debounced("suit", on_applied=applied.append)
    scheduler.advance(0.1)

    assert applied == []
    scheduler.advance(0.2)

    assert len(applied) == 1
    assert applied[0].view.query == "suit"
    assert session.query == "suit"


def test_go_home_cancels_pending_search(session: ShopSession, scheduler: ManualScheduler) -> None:
    session.search_debounced("suit")
    session.dispatch(cmd.GoHome())
    scheduler.advance(1)

    assert session.query == ""


def test_rapid_open_close_open_ends_visible(session: ShopSession, scheduler: ManualScheduler) -> None:
    session.dispatch(cmd.OpenCart())
    session.dispatch(cmd.CloseCurrent())
    session.dispatch(cmd.OpenCart())
    scheduler.advance(1)

    overlay = session.view().overlay
    assert overlay.mounted and overlay.shown
    assert scheduler.pending == 0


def test_unknown_command_raises(session: ShopSession) -> None:
    with pytest.raises(TypeError):
        session.dispatch(object())  # type: ignore[arg-type]


def test_registry_keeps_one_session_per_user(lookup, scheduler: ManualScheduler) -> None:
    storage = MemoryKeyValueStorage()
    registry = SessionRegistry(lookup, storage, scheduler, base_key="cart")

    first = registry.get(1)
    first.dispatch(cmd.AddToCart("1"))

    assert registry.get(1) is first
    assert registry.get(2).view().cart_is_empty
    assert storage.load("cart:1") == '{"1": 1}'
    assert len(registry) == 2


def test_registry_restores_persisted_cart(lookup, scheduler: ManualScheduler) -> None:
    storage = MemoryKeyValueStorage({"cart:5": '{"3": 4}'})
    registry = SessionRegistry(lookup, storage, scheduler, base_key="cart")

    view = registry.get(5).view()
    assert view.total_quantity == 4
    assert view.subtotal == Decimal("79.96")
