"""Telegram front end for the shop.

Provides:
- Catalog browsing with category buttons and text search
- Item detail panel
- Cart with quantity controls
- Checkout form and order confirmation
"""
from .router import build_router

__all__ = ["build_router"]
