from __future__ import annotations
import logging
from typing import Iterable, Optional
from pydantic import TypeAdapter

from .database import KeyValueStorage, load_document, save_document
from .events import WISHLIST_CHANGED, EventBus
from .schemas import Product, WishlistState

logger = logging.getLogger(__name__)

WISHLIST_KEY = "wishlist"

_items_adapter = TypeAdapter(list[Product])

class WishlistStore:
    """Liked products keyed by id, persisted on every change."""

    def __init__(
        self,
        storage: KeyValueStorage,
        items: Optional[Iterable[Product]] = None,
        events: Optional[EventBus] = None,
    ):
        self.storage = storage
        self.events = events or EventBus()
        self._items: dict[str, Product] = {}
        for product in items or []:
            self._items.setdefault(product.id, product)

    @classmethod
    def load(cls, storage: KeyValueStorage, events: Optional[EventBus] = None) -> "WishlistStore":
        result = load_document(storage, WISHLIST_KEY, _items_adapter)
        if not result.ok:
            logger.warning("Failed to load wishlist, starting empty: %s", result.error)
        return cls(storage, result.unwrap_or([]), events)

    @property
    def items(self) -> list[Product]:
        return list(self._items.values())

    @property
    def count(self) -> int:
        return len(self._items)

    def contains(self, product_id: str) -> bool:
        return product_id in self._items

    __contains__ = contains

    def to_state(self) -> WishlistState:
        return WishlistState(items=self.items, count=self.count)

    def add(self, product: Product) -> bool:
        if product.id in self._items:
            return False
        self._items[product.id] = product
        self._commit()
        self.events.publish(WISHLIST_CHANGED, name=product.name, liked=True)
        return True

    def remove(self, product_id: str) -> bool:
        product = self._items.pop(product_id, None)
        if product is None:
            return False
        self._commit()
        self.events.publish(WISHLIST_CHANGED, name=product.name, liked=False)
        return True

    def toggle(self, product: Product) -> bool:
        """Add or remove ``product``; returns the new membership."""
        if self.remove(product.id):
            return False
        return self.add(product)

    def clear(self) -> None:
        self._items.clear()
        self._commit()
        self.events.publish(WISHLIST_CHANGED)

    def _commit(self) -> None:
        save_document(
            self.storage,
            WISHLIST_KEY,
            [product.model_dump(mode="json") for product in self._items.values()],
        )
