"""Application service: the session's cart.

One CartStore is constructed per session by the composition root. It
owns the authoritative Cart, and every mutation synchronously

1. recomputes the derived totals,
2. notifies subscribers with an immutable snapshot,
3. persists the cart through the repository.
"""

from __future__ import annotations

import logging
from typing import Callable

from harvest.application.dto import CartTotals
from harvest.domain.exceptions import CorruptCartError
from harvest.domain.model.cart import Cart, CartLine
from harvest.domain.model.product import ProductRef
from harvest.domain.repository.cart_repository import CartRepository

log = logging.getLogger(__name__)

CartSnapshot = tuple[CartLine, ...]
Subscriber = Callable[[CartSnapshot], None]


class CartStore:

    def __init__(self, cart_repo: CartRepository) -> None:
        self._cart_repo = cart_repo
        self._cart = Cart()
        self._subscribers: list[Subscriber] = []
        self._totals = CartTotals(total_items=0, total_price=self._cart.total_price)

    # --- Lifecycle ------------------------------------------------------------

    def load(self) -> None:
        """Restore the persisted cart; a corrupt record becomes an empty cart."""
        try:
            self._cart = self._cart_repo.load()
        except CorruptCartError as exc:
            log.warning("Discarding unreadable saved cart: %s", exc)
            self._cart = Cart()
        self._recompute()
        self._notify()

    def save(self) -> None:
        """Persist the cart; a storage failure is logged and the in-memory cart kept."""
        try:
            self._cart_repo.save(self._cart)
        except OSError:
            log.exception("Could not save the cart")

    # --- Subscriptions --------------------------------------------------------

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register *subscriber* and return a function that unregisters it."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    # --- Mutations ------------------------------------------------------------

    def add_item(self, product: ProductRef, quantity: int = 1) -> int:
        """Add to the cart; returns the effective (possibly clamped) quantity."""
        requested = self._cart.quantity_of(product.id) + quantity
        effective = self._cart.add(product, quantity)
        if effective < requested:
            log.info(
                "Clamped %s to available stock of %d", product.name, product.available_stock
            )
        self._changed()
        return effective

    def remove_item(self, product_id: str) -> None:
        if self._cart.remove(product_id):
            self._changed()

    def update_quantity(self, product_id: str, quantity: int) -> int:
        if not self._cart.contains(product_id):
            return 0
        effective = self._cart.update_quantity(product_id, quantity)
        self._changed()
        return effective

    def clear(self) -> None:
        self._cart.clear()
        self._changed()

    # --- Queries --------------------------------------------------------------

    def snapshot(self) -> CartSnapshot:
        return self._cart.snapshot()

    def totals(self) -> CartTotals:
        return self._totals

    def is_empty(self) -> bool:
        return self._cart.is_empty

    def contains(self, product_id: str) -> bool:
        return self._cart.contains(product_id)

    def quantity_of(self, product_id: str) -> int:
        return self._cart.quantity_of(product_id)

    # --- Internal helpers -----------------------------------------------------

    def _changed(self) -> None:
        self._recompute()
        self._notify()
        self.save()

    def _recompute(self) -> None:
        self._totals = CartTotals(
            total_items=self._cart.total_items,
            total_price=self._cart.total_price,
        )

    def _notify(self) -> None:
        snapshot = self._cart.snapshot()
        for subscriber in list(self._subscribers):
            try:
                subscriber(snapshot)
            except Exception:
                log.exception("Cart subscriber %r failed", subscriber)
