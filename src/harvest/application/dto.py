"""Data Transfer Objects: plain containers that cross layer boundaries."""

from __future__ import annotations

from dataclasses import dataclass

from harvest.domain.model.order import PlaceOrderResult
from harvest.domain.model.payment import PaymentRequest
from harvest.domain.model.value_objects import Money


@dataclass(frozen=True)
class CartTotals:
    total_items: int
    total_price: Money


@dataclass(frozen=True)
class PaymentInitiation:
    """Output of starting an online payment.

    ``payment_request`` is None when the order could not be created.
    """

    order: PlaceOrderResult
    payment_request: PaymentRequest | None = None

    @property
    def redirected(self) -> bool:
        return self.payment_request is not None
