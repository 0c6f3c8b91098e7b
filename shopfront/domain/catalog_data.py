"""Built-in product catalog."""
from __future__ import annotations

from decimal import Decimal

from .catalog import CatalogItem, CatalogLookup, Category


def _item(item_id: str, title: str, category: Category, price: str, seed: str, description: str) -> CatalogItem:
    return CatalogItem(
        id=item_id,
        title=title,
        category=category,
        price=Decimal(price),
        image=f"https://picsum.photos/seed/{seed}/800/800",
        description=description,
    )


DEFAULT_CATALOG: tuple[CatalogItem, ...] = (
    _item("1", "Classic Sneakers", Category.SHOES, "59.99", "sneaker1",
          "Comfortable everyday sneakers with cushioned sole."),
    _item("2", "Running Pro", Category.SHOES, "89.99", "sneaker2",
          "Lightweight running shoes engineered for speed."),
    _item("3", "White Tee", Category.SHIRTS, "19.99", "shirt1",
          "Soft, breathable 100% cotton T-shirt."),
    _item("4", "Denim Shirt", Category.SHIRTS, "39.99", "shirt2",
          "Stylish denim button-up."),
    _item("5", "Casual Shorts", Category.SHORTS, "24.99", "shorts1",
          "Everyday shorts perfect for summer."),
    _item("6", "Chino Shorts", Category.SHORTS, "29.99", "shorts2",
          "Smart-casual chinos."),
    _item("7", "Slim Trousers", Category.TROUSERS, "49.99", "trousers1",
          "Tailored slim trousers."),
    _item("8", "Formal Trousers", Category.TROUSERS, "59.99", "trousers2",
          "Classic formal trousers."),
    _item("9", "Business Suit", Category.SUITS, "199.99", "suit1",
          "Two-piece business suit."),
    _item("10", "Evening Suit", Category.SUITS, "249.99", "suit2",
          "Tailored evening suit."),
)


def default_lookup() -> CatalogLookup:
    return CatalogLookup(DEFAULT_CATALOG)
