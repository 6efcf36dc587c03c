from __future__ import annotations
import logging
from typing import Iterable, Optional
from pydantic import TypeAdapter

from .database import KeyValueStorage, load_document, save_document
from .events import CART_CLEARED, ITEM_ADDED, ITEM_REMOVED, EventBus
from .schemas import CartLine, CartState, Product

logger = logging.getLogger(__name__)

CART_KEY = "cart"

_lines_adapter = TypeAdapter(list[CartLine])

def summarize(lines: Iterable[CartLine]) -> tuple[int, float]:
    """(count, total) for a set of cart lines."""
    count = 0
    total = 0.0
    for line in lines:
        count += line.quantity
        total += line.product.effective_price * line.quantity
    return count, total

def merge_lines(lines: Iterable[CartLine]) -> list[CartLine]:
    """Collapse lines sharing a product id, keeping first-seen order."""
    merged: dict[str, CartLine] = {}
    for line in lines:
        existing = merged.get(line.product.id)
        if existing is None:
            merged[line.product.id] = line.model_copy()
        else:
            existing.quantity += line.quantity
    return list(merged.values())

class CartStore:
    """Cart line items with derived count/total, persisted on every change."""

    def __init__(
        self,
        storage: KeyValueStorage,
        lines: Optional[Iterable[CartLine]] = None,
        events: Optional[EventBus] = None,
    ):
        self.storage = storage
        self.events = events or EventBus()
        self._lines: dict[str, CartLine] = {line.product.id: line for line in merge_lines(lines or [])}
        self._open = False
        self._count, self._total = summarize(self._lines.values())

    @classmethod
    def load(cls, storage: KeyValueStorage, events: Optional[EventBus] = None) -> "CartStore":
        result = load_document(storage, CART_KEY, _lines_adapter)
        if not result.ok:
            logger.warning("Failed to load cart, starting empty: %s", result.error)
        return cls(storage, result.unwrap_or([]), events)

    # Read side

    @property
    def lines(self) -> list[CartLine]:
        return [line.model_copy() for line in self._lines.values()]

    @property
    def count(self) -> int:
        return self._count

    @property
    def total(self) -> float:
        return self._total

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def get_line(self, product_id: str) -> Optional[CartLine]:
        line = self._lines.get(product_id)
        return line.model_copy() if line else None

    def to_state(self) -> CartState:
        return CartState(items=self.lines, open=self._open, count=self._count, total=self._total)

    def serialize(self) -> list[dict]:
        return [line.model_dump(mode="json") for line in self._lines.values()]

    # Mutations

    def add_item(self, product: Product, quantity: int = 1) -> None:
        if quantity <= 0:
            logger.debug("Ignoring add of %s with quantity %s", product.id, quantity)
            return
        line = self._lines.get(product.id)
        if line is None:
            self._lines[product.id] = CartLine(product=product, quantity=quantity)
        else:
            line.quantity += quantity
        self._open = True
        self._commit()
        self.events.publish(ITEM_ADDED, name=product.name, quantity=quantity)

    def remove_item(self, product_id: str) -> None:
        line = self._lines.pop(product_id, None)
        if line is None:
            return
        self._commit()
        self.events.publish(ITEM_REMOVED, name=line.product.name, quantity=line.quantity)

    def set_quantity(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return
        line = self._lines.get(product_id)
        if line is None:
            return
        line.quantity = quantity
        self._commit()

    def clear(self) -> None:
        self._lines.clear()
        self._commit()
        self.events.publish(CART_CLEARED)

    def toggle_open(self) -> bool:
        self._open = not self._open
        return self._open

    def _commit(self) -> None:
        self._count, self._total = summarize(self._lines.values())
        save_document(self.storage, CART_KEY, self.serialize())
