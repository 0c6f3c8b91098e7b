"""Shop router orchestrator.

Wires the browsing/cart and checkout handler modules onto one router and
keeps the single `setup_dependencies` entry point used by the bot.
"""
from __future__ import annotations

from aiogram import Router

from shopfront.services.shop_session import SessionRegistry

from .common import setup_dependencies as _setup_common_dependencies
from . import checkout as shop_checkout
from . import shop as shop_browse


def build_router(session_registry: SessionRegistry) -> Router:
    """Initialize shared dependencies and register all shop handlers."""
    _setup_common_dependencies(session_registry)

    router = Router(name="shop")
    shop_browse.register(router)
    shop_checkout.register(router)
    return router
