"""Application-wide constants and configuration defaults.

Centralizes magic numbers so the controller, the session and the bot
front end agree on them.
"""

# ============== STORAGE ==============
DEFAULT_CART_STORAGE_KEY = "simple_shop_cart_v1"
DEFAULT_CART_STORAGE_PATH = "data/carts.json"
STORAGE_BACKENDS = ("memory", "file", "redis")

# ============== TIMERS (seconds) ==============
OVERLAY_HIDE_DELAY = 0.22  # matches the overlay fade-out transition
OVERLAY_FADE_IN_DELAY = 0.0  # next render pass
SEARCH_DEBOUNCE_DELAY = 0.22

# ============== MONEY ==============
MONEY_QUANTUM = "0.01"

# ============== DISPLAY ==============
CURRENCY_SYMBOL = "$"
PLACEHOLDER_TITLE = "Unknown"
ALL_ITEMS_HEADING = "All items"
ORDER_ID_PREFIX = "ORD"
