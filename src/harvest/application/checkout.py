"""Application service: Checkout use cases.

Coordinates the cart, the order gateway and (for online payment) the
payment request builder. Validation failures are turned into a
``VALIDATION`` PlaceOrderResult here so callers only ever deal with
results.

Cash on delivery clears the cart as soon as the backend accepts the
order. Online payment leaves the cart alone: only a verified COMPLETE
callback may clear it.
"""

from __future__ import annotations

import logging

from harvest.application.cart_store import CartStore
from harvest.application.dto import PaymentInitiation
from harvest.application.payment_request_builder import PaymentRequestBuilder
from harvest.domain.exceptions import ValidationError
from harvest.domain.gateway.order_gateway import OrderGateway
from harvest.domain.model.order import (
    DeliveryAddress,
    OrderErrorKind,
    OrderRequest,
    PaymentMethod,
    PaymentStatus,
    PlaceOrderResult,
)
from harvest.domain.repository.address_book import AddressBook

log = logging.getLogger(__name__)


class CheckoutHandler:

    def __init__(
        self,
        cart_store: CartStore,
        order_gateway: OrderGateway,
        payment_builder: PaymentRequestBuilder | None = None,
        address_book: AddressBook | None = None,
    ) -> None:
        self._cart_store = cart_store
        self._order_gateway = order_gateway
        self._payment_builder = payment_builder
        self._address_book = address_book

    def saved_address(self) -> DeliveryAddress | None:
        if self._address_book is None:
            return None
        return self._address_book.load()

    def place_cash_on_delivery(self, address: DeliveryAddress) -> PlaceOrderResult:
        result = self._submit(address, PaymentMethod.CASH_ON_DELIVERY)
        if result.succeeded:
            self._cart_store.clear()
            log.info("Cash-on-delivery order %s placed; cart cleared", result.order_id)
        return result

    def start_online_payment(self, address: DeliveryAddress) -> PaymentInitiation:
        """Create a pending order, then redirect to the gateway to pay for it."""
        if self._payment_builder is None:
            raise RuntimeError("CheckoutHandler was built without a payment builder")

        total = self._cart_store.totals().total_price
        result = self._submit(address, PaymentMethod.ESEWA)
        if not result.succeeded:
            return PaymentInitiation(order=result)

        try:
            request = self._payment_builder.build(result.order_id, total)  # type: ignore[arg-type]
        except ValidationError as exc:
            log.warning("Could not build payment for order %s: %s", result.order_id, exc)
            return PaymentInitiation(
                order=PlaceOrderResult.failed(OrderErrorKind.VALIDATION, str(exc))
            )

        self._payment_builder.submit(request)
        return PaymentInitiation(order=result, payment_request=request)

    # --- Internal helpers -----------------------------------------------------

    def _submit(self, address: DeliveryAddress, method: PaymentMethod) -> PlaceOrderResult:
        try:
            request = OrderRequest.from_cart(
                self._cart_store.snapshot(),
                address,
                payment_method=method,
                payment_status=PaymentStatus.PENDING,
            )
        except ValidationError as exc:
            return PlaceOrderResult.failed(
                OrderErrorKind.VALIDATION, str(exc), field_errors=exc.field_errors
            )

        result = self._order_gateway.place_order(request)
        if result.succeeded and self._address_book is not None:
            self._address_book.save(address)
        return result
