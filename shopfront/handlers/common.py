"""Common shop handler dependencies and small helpers.

This module centralizes the shared session registry used across the
shop handler modules.
"""
from __future__ import annotations

import html
from decimal import Decimal
from typing import Any

from shopfront.core.constants import CURRENCY_SYMBOL
from shopfront.services.shop_session import SessionRegistry

# Set from `setup_dependencies` in `router.py`.
registry: SessionRegistry | None = None


def setup_dependencies(session_registry: SessionRegistry) -> None:
    """Initialize shared shop dependencies."""
    global registry
    registry = session_registry


def esc(val: Any) -> str:
    """HTML-escape helper used in shop texts."""
    if val is None:
        return ""
    return html.escape(str(val))


def format_price(amount: Decimal | int | float) -> str:
    return f"{CURRENCY_SYMBOL}{Decimal(str(amount)):,.2f}"
