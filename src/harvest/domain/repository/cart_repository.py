"""Abstract repository for the Cart aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON file, in-memory)
live elsewhere.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from harvest.domain.model.cart import Cart


class CartRepository(ABC):

    @abstractmethod
    def load(self) -> Cart:
        """Return the persisted cart, or an empty one if nothing is stored.

        Raises CorruptCartError if a stored record cannot be parsed.
        """

    @abstractmethod
    def save(self, cart: Cart) -> None:
        """Persist the whole cart, replacing the previous record."""
