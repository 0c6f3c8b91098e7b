"""Shopfront - catalog browsing, cart and checkout core with a Telegram front end."""

__version__ = "1.0.0"
