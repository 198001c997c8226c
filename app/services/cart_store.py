# app/services/cart_store.py
"""
In-memory shopping cart.

A CartStore holds the lines of one shopper's cart and tells its
subscribers after every change. Carts are not stored in the database:
they live as long as the process and the shopper's `cart_session`
cookie, and a restart empties them.
"""

import logging
import uuid
from typing import Callable

from app.models.product import Product
from app.schemas.cart import CartLine, CartLineRead, CartSummary, ProductSnapshot

logger = logging.getLogger(__name__)

CartListener = Callable[["CartStore"], None]


class CartStore:
    """
    Ordered (by first add) collection of cart lines.

    Invariants:
      - at most one line per product id
      - every line has quantity >= 1
      - totals are computed on read, so they are never stale
    """

    def __init__(self) -> None:
        self._lines: dict[uuid.UUID, CartLine] = {}
        self._listeners: list[CartListener] = []

    # ---- subscribe / notify ----

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """
        Register `listener(store)`; it runs after every state change.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ---- reads ----

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def get_line(self, product_id: uuid.UUID) -> CartLine | None:
        return self._lines.get(product_id)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def total_price(self) -> float:
        return sum((line.subtotal for line in self._lines.values()), 0.0)

    def summary(self) -> CartSummary:
        return CartSummary(
            items=[
                CartLineRead(
                    product_id=line.product.product_id,
                    name=line.product.name,
                    price=line.product.price,
                    image_url=line.product.image_url,
                    quantity=line.quantity,
                    subtotal=line.subtotal,
                )
                for line in self._lines.values()
            ],
            total_items=self.total_items,
            total_price=self.total_price,
        )

    # ---- mutations ----

    def add_item(self, product: Product | ProductSnapshot) -> CartLine:
        """
        +1 on the product's line, creating it (quantity 1) if needed.
        The snapshot of a new line is taken from `product` now.
        """
        if isinstance(product, ProductSnapshot):
            snapshot = product
        else:
            snapshot = ProductSnapshot(
                product_id=product.id,
                name=product.name,
                price=product.price,
                image_url=product.image_url,
            )

        line = self._lines.get(snapshot.product_id)
        if line is None:
            line = CartLine(product=snapshot, quantity=1)
            self._lines[snapshot.product_id] = line
        else:
            line.quantity += 1

        self._notify()
        return line

    def set_quantity(self, product_id: uuid.UUID, quantity: int) -> None:
        """
        Absolute set. quantity <= 0 removes the line; unknown ids are ignored.
        """
        if quantity <= 0:
            self.remove_item(product_id)
            return

        line = self._lines.get(product_id)
        if line is None or line.quantity == quantity:
            return
        line.quantity = quantity
        self._notify()

    def remove_item(self, product_id: uuid.UUID) -> None:
        if self._lines.pop(product_id, None) is not None:
            self._notify()

    def clear(self) -> None:
        if self._lines:
            self._lines.clear()
            self._notify()
