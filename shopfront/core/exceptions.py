"""Custom exceptions for Shopfront."""
from __future__ import annotations


class ShopfrontException(Exception):
    """Base exception for all Shopfront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class StorageException(ShopfrontException):
    """Key-value storage read/write errors."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"Storage operation failed for key {key!r}: {reason}")
        self.key = key
        self.reason = reason


class ValidationException(ShopfrontException):
    """Input validation errors."""

    def __init__(self, message: str, errors: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.errors = dict(errors or {})


class ConfigurationException(ShopfrontException):
    """Configuration errors."""

    pass
