"""Port to the marketplace backend's order endpoint."""

from __future__ import annotations

from abc import ABC, abstractmethod

from harvest.domain.model.order import OrderRequest, PlaceOrderResult


class OrderGateway(ABC):

    @abstractmethod
    def place_order(self, request: OrderRequest) -> PlaceOrderResult:
        """Submit *request* and return the order id or a classified error.

        Implementations never raise for transport, auth, validation or
        server failures.
        """
