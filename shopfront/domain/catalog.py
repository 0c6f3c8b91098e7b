"""Catalog entities: the fixed category set and immutable catalog items."""
from __future__ import annotations

from collections.abc import Iterable, Iterator
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shopfront.core.constants import PLACEHOLDER_TITLE


class Category(str, Enum):
    """Product categories."""

    SHOES = "shoes"
    SHIRTS = "shirts"
    SHORTS = "shorts"
    TROUSERS = "trousers"
    SUITS = "suits"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class CatalogItem(BaseModel):
    """Catalog item with type-safe fields. Never mutated after load."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Unique item ID")
    title: str = Field(..., description="Product title")
    category: Category | None = Field(..., description="Product category")
    price: Decimal = Field(..., ge=0, description="Unit price")
    image: str = Field("", description="Image URL")
    description: str = Field("", description="Product description")
    is_placeholder: bool = Field(False, description="Stands in for an unknown ID")

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: object) -> object:
        # floats go through str() so 19.99 stays 19.99
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @classmethod
    def placeholder(cls, item_id: str) -> CatalogItem:
        """Zero-price stand-in for an id that no longer resolves."""
        return cls(
            id=item_id or "?",
            title=PLACEHOLDER_TITLE,
            category=None,
            price=Decimal("0"),
            is_placeholder=True,
        )


class CatalogLookup:
    """Ordered catalog with id lookup."""

    def __init__(self, items: Iterable[CatalogItem]):
        self._items: tuple[CatalogItem, ...] = tuple(items)
        self._by_id: dict[str, CatalogItem] = {}
        for item in self._items:
            if item.id in self._by_id:
                raise ValueError(f"Duplicate catalog id: {item.id}")
            self._by_id[item.id] = item

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    @property
    def items(self) -> tuple[CatalogItem, ...]:
        return self._items

    def get(self, item_id: str) -> CatalogItem | None:
        return self._by_id.get(item_id)

    def resolve(self, item_id: str) -> CatalogItem:
        """Return the item, or a placeholder for unknown ids."""
        return self._by_id.get(item_id) or CatalogItem.placeholder(item_id)
