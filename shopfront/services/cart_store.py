"""Cart store - product id to quantity mapping with persistence.

The in-memory mapping is authoritative. It is loaded once from the
key-value storage when the store is built and written back after every
mutation. Storage failures degrade durability only: the cart keeps working
for the rest of the session.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from shopfront.core.constants import DEFAULT_CART_STORAGE_KEY, MONEY_QUANTUM
from shopfront.core.exceptions import StorageException
from shopfront.domain.catalog import CatalogItem, CatalogLookup
from shopfront.integrations.kv_storage import KeyValueStorage

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CartLine:
    """Single line in cart."""

    id: str
    quantity: int


@dataclass(frozen=True, slots=True)
class DetailedCartLine:
    item: CatalogItem
    quantity: int

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def line_total(self) -> Decimal:
        return self.item.price * self.quantity


@dataclass(frozen=True, slots=True)
class CartTotals:
    total_quantity: int
    line_count: int


class _LinesView:
    """Restartable view over the cart lines; each iteration reads current state."""

    def __init__(self, quantities: dict[str, int]):
        self._quantities = quantities

    def __iter__(self) -> Iterator[CartLine]:
        for item_id, quantity in list(self._quantities.items()):
            yield CartLine(item_id, quantity)

    def __len__(self) -> int:
        return len(self._quantities)


def decode_cart_blob(blob: str | None) -> dict[str, int]:
    """Parse a persisted blob. Anything unusable decodes to an empty cart."""
    if not blob:
        return {}
    try:
        payload = json.loads(blob)
    except ValueError:
        logger.warning("Persisted cart is not valid JSON; starting with an empty cart")
        return {}
    if not isinstance(payload, dict):
        logger.warning("Persisted cart is not a JSON object; starting with an empty cart")
        return {}

    quantities: dict[str, int] = {}
    for item_id, quantity in payload.items():
        # bool is an int subclass; true/false are not quantities
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            logger.warning("Dropping invalid cart entry %r=%r", item_id, quantity)
            continue
        quantities[str(item_id)] = quantity
    return quantities


def encode_cart_blob(quantities: dict[str, int]) -> str:
    return json.dumps(quantities, ensure_ascii=False, sort_keys=True)


class CartStore:
    """Owns the cart state. Mutated only through its operations."""

    def __init__(self, storage: KeyValueStorage, key: str = DEFAULT_CART_STORAGE_KEY):
        self._storage = storage
        self._key = key
        self._quantities: dict[str, int] = self._load()
        self.last_save_ok = True

    # -------------------------
    # Persistence
    # -------------------------
    def _load(self) -> dict[str, int]:
        try:
            blob = self._storage.load(self._key)
        except StorageException as exc:
            logger.warning("Cart load failed for %s, starting empty: %s", self._key, exc)
            return {}
        quantities = decode_cart_blob(blob)
        logger.debug("Loaded cart %s with %d lines", self._key, len(quantities))
        return quantities

    def _save(self) -> None:
        blob = encode_cart_blob(self._quantities)
        try:
            ok = self._storage.save(self._key, blob)
        except StorageException as exc:
            logger.warning("Cart save failed for %s: %s", self._key, exc)
            ok = False
        if not ok:
            logger.warning("Cart %s not persisted; keeping in-memory state", self._key)
        self.last_save_ok = ok

    # -------------------------
    # Mutations
    # -------------------------
    def add(self, product_id: str, delta: int = 1) -> CartTotals:
        """Change quantity by ``delta``; lines that reach zero or below are deleted."""
        new_qty = self._quantities.get(product_id, 0) + int(delta)
        self._store(product_id, new_qty)
        logger.info("Cart %s: add %s delta=%s -> qty=%s", self._key, product_id, delta, max(new_qty, 0))
        self._save()
        return self.totals()

    def set_quantity(self, product_id: str, quantity: int) -> CartTotals:
        self._store(product_id, int(quantity))
        logger.info("Cart %s: set %s qty=%s", self._key, product_id, quantity)
        self._save()
        return self.totals()

    def decrement(self, product_id: str) -> CartTotals:
        """Decrement one step. An absent line stays absent and nothing is written."""
        current = self._quantities.get(product_id)
        if current is None:
            logger.debug("Cart %s: decrement of absent line %s ignored", self._key, product_id)
            return self.totals()
        return self.set_quantity(product_id, current - 1)

    def remove(self, product_id: str) -> CartTotals:
        if self._quantities.pop(product_id, None) is not None:
            logger.info("Removed item %s from cart %s", product_id, self._key)
        self._save()
        return self.totals()

    def clear(self) -> CartTotals:
        self._quantities.clear()
        logger.info("Cleared cart %s", self._key)
        self._save()
        return self.totals()

    def _store(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self._quantities.pop(product_id, None)
        else:
            self._quantities[product_id] = quantity

    # -------------------------
    # Derived views
    # -------------------------
    def quantity(self, product_id: str) -> int:
        return self._quantities.get(product_id, 0)

    def lines(self) -> _LinesView:
        return _LinesView(self._quantities)

    def detailed_lines(self, lookup: CatalogLookup) -> list[DetailedCartLine]:
        return [DetailedCartLine(lookup.resolve(line.id), line.quantity) for line in self.lines()]

    def subtotal(self, lookup: CatalogLookup) -> Decimal:
        total = sum((line.line_total for line in self.detailed_lines(lookup)), Decimal("0"))
        return total.quantize(Decimal(MONEY_QUANTUM), rounding=ROUND_HALF_UP)

    def total_quantity(self) -> int:
        return sum(self._quantities.values())

    def totals(self) -> CartTotals:
        return CartTotals(total_quantity=self.total_quantity(), line_count=len(self._quantities))

    def is_empty(self) -> bool:
        return not self._quantities

    def snapshot(self) -> dict[str, int]:
        return dict(self._quantities)

    def __len__(self) -> int:
        return len(self._quantities)
