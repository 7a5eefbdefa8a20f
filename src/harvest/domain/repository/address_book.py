"""Abstract store for the shopper's last used delivery address."""

from __future__ import annotations

from abc import ABC, abstractmethod

from harvest.domain.model.order import DeliveryAddress


class AddressBook(ABC):

    @abstractmethod
    def load(self) -> DeliveryAddress | None:
        """Return the saved address, or None."""

    @abstractmethod
    def save(self, address: DeliveryAddress) -> None:
        """Remember *address* for the next checkout."""
