# Overview: Cart state container; server-independent, persisted whole after every change.

"""
Shopping Cart

Line identity is (product_id, color, size): adding an item whose triple
matches an existing line increments that line's quantity.

Removal and quantity updates match differently: product_id must match, and
color/size only narrow the match when they are given. Omitting them matches
lines with any color/size. This asymmetry with add_to_cart is kept as-is.

Every mutation writes the entire serialized cart to the store. There is no
debouncing.
"""

from __future__ import annotations

import json
import logging

from ..errors import ValidationError
from ..models import CartItem
from ..storage import CART_KEY, KeyValueStore


logger = logging.getLogger(__name__)


def _matches(item: CartItem, product_id: str, color: str | None, size: str | None) -> bool:
    if item.product_id != product_id:
        return False
    if color and item.color != color:
        return False
    if size and item.size != size:
        return False
    return True


class CartService:
    def __init__(self, store: KeyValueStore):
        self.store = store
        self._items: list[CartItem] = self._load()

    def _load(self) -> list[CartItem]:
        raw = self.store.get(CART_KEY)
        if not raw:
            return []
        try:
            return [CartItem.from_dict(entry) for entry in json.loads(raw)]
        except (ValueError, KeyError, TypeError):
            logger.warning("Discarding unreadable saved cart")
            return []

    def _persist(self) -> None:
        payload = json.dumps([item.to_dict() for item in self._items], ensure_ascii=False)
        self.store.set(CART_KEY, payload)
        logger.debug("Cart saved (%d lines)", len(self._items))

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(CartItem(**vars(item)) for item in self._items)

    def add_to_cart(self, item: CartItem) -> None:
        if item.quantity < 1:
            raise ValidationError("quantity must be at least 1")

        for existing in self._items:
            if existing.line_key == item.line_key:
                existing.quantity += item.quantity
                break
        else:
            self._items.append(CartItem(**vars(item)))
        self._persist()

    def remove_from_cart(self, product_id: str, color: str | None = None, size: str | None = None) -> None:
        self._items = [item for item in self._items if not _matches(item, product_id, color, size)]
        self._persist()

    def update_quantity(
        self,
        product_id: str,
        quantity: int,
        color: str | None = None,
        size: str | None = None,
    ) -> None:
        if quantity <= 0:
            self.remove_from_cart(product_id, color, size)
            return

        for item in self._items:
            if _matches(item, product_id, color, size):
                item.quantity = quantity
        self._persist()

    def clear_cart(self) -> None:
        self._items = []
        self._persist()

    def get_cart_total(self) -> float:
        return sum(item.price * item.quantity for item in self._items)

    def get_cart_items_count(self) -> int:
        return sum(item.quantity for item in self._items)
