"""Environment-driven configuration objects for the shop."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import (
    DEFAULT_CART_STORAGE_KEY,
    DEFAULT_CART_STORAGE_PATH,
    OVERLAY_HIDE_DELAY,
    SEARCH_DEBOUNCE_DELAY,
    STORAGE_BACKENDS,
)
from .exceptions import ConfigurationException


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationException(f"{name} must be >= 0, got {raw!r}")
    return value


@dataclass(slots=True)
class StorageConfig:
    backend: str
    path: str
    redis_url: str | None
    key: str


@dataclass(slots=True)
class Settings:
    bot_token: str | None
    storage: StorageConfig
    overlay_hide_delay: float
    search_debounce: float
    log_level: str

    def require_bot_token(self) -> str:
        """Return the bot token or fail loudly when the bot is started without one."""
        if not self.bot_token:
            raise ConfigurationException("TELEGRAM_BOT_TOKEN environment variable is not set")
        return self.bot_token


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    backend = (os.getenv("CART_STORAGE") or "memory").strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ConfigurationException(
            f"CART_STORAGE must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
        )

    redis_url = os.getenv("REDIS_URL") or None
    if backend == "redis" and not redis_url:
        raise ConfigurationException("CART_STORAGE=redis requires REDIS_URL")

    storage = StorageConfig(
        backend=backend,
        path=os.getenv("CART_STORAGE_PATH", DEFAULT_CART_STORAGE_PATH),
        redis_url=redis_url,
        key=os.getenv("CART_STORAGE_KEY", DEFAULT_CART_STORAGE_KEY),
    )

    return Settings(
        bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        storage=storage,
        overlay_hide_delay=_get_float("OVERLAY_HIDE_DELAY", OVERLAY_HIDE_DELAY),
        search_debounce=_get_float("SEARCH_DEBOUNCE", SEARCH_DEBOUNCE_DELAY),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )
