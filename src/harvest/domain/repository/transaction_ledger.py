"""Abstract record of payment transactions whose outcome was already applied."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TransactionLedger(ABC):

    @abstractmethod
    def contains(self, transaction_uuid: str) -> bool:
        """True if *transaction_uuid* was recorded by an earlier run."""

    @abstractmethod
    def record(self, transaction_uuid: str) -> None:
        """Remember *transaction_uuid* so its outcome is never applied again."""
