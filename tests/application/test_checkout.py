"""Integration tests for the Checkout use cases.

Uses in-memory fakes; no file I/O, no network.
"""

import random
from datetime import datetime, timezone

import pytest

from harvest.application.cart_store import CartStore
from harvest.application.checkout import CheckoutHandler
from harvest.application.payment_request_builder import PaymentRequestBuilder
from harvest.domain.model.order import OrderErrorKind, PaymentMethod, PlaceOrderResult
from tests.fakes import (
    PRODUCT_A,
    PRODUCT_B,
    SECRET,
    FakeOrderGateway,
    InMemoryAddressBook,
    InMemoryCartRepository,
    RecordingNavigator,
    make_address,
    make_product,
)


def _setup(gateway_result: PlaceOrderResult | None = None, fill_cart: bool = True):
    store = CartStore(InMemoryCartRepository())
    if fill_cart:
        store.add_item(make_product(PRODUCT_A, "Tomatoes", price="80"), 2)
        store.add_item(make_product(PRODUCT_B, "Honey", price="150"), 1)
    gateway = FakeOrderGateway(gateway_result)
    navigator = RecordingNavigator()
    builder = PaymentRequestBuilder(
        secret=SECRET,
        product_code="EPAYTEST",
        form_url="https://gateway.test/form",
        success_url="https://shop.test/payment/success",
        failure_url="https://shop.test/payment/failure",
        navigator=navigator,
        clock=lambda: datetime(2025, 6, 10, tzinfo=timezone.utc),
        rng=random.Random(1),
    )
    address_book = InMemoryAddressBook()
    handler = CheckoutHandler(store, gateway, builder, address_book)
    return handler, store, gateway, navigator, address_book


class TestCashOnDelivery:

    def test_success_clears_cart_and_remembers_address(self):
        handler, store, gateway, _, address_book = _setup()
        result = handler.place_cash_on_delivery(make_address())

        assert result.succeeded
        assert store.is_empty()
        assert address_book.address == make_address()
        (request,) = gateway.requests
        assert request.payment_method is PaymentMethod.CASH_ON_DELIVERY
        assert request.to_payload()["paymentStatus"] == "pending"

    def test_backend_failure_keeps_cart(self):
        failure = PlaceOrderResult.failed(OrderErrorKind.SERVER, "down", status_code=503)
        handler, store, _, _, address_book = _setup(failure)
        result = handler.place_cash_on_delivery(make_address())

        assert result.error.kind is OrderErrorKind.SERVER
        assert store.totals().total_items == 3
        assert address_book.address is None

    def test_empty_cart_is_a_validation_result(self):
        handler, _, gateway, _, _ = _setup(fill_cart=False)
        result = handler.place_cash_on_delivery(make_address())

        assert result.error.kind is OrderErrorKind.VALIDATION
        assert gateway.requests == []

    def test_incomplete_address_reports_fields(self):
        handler, _, gateway, _, _ = _setup()
        result = handler.place_cash_on_delivery(make_address(street=""))

        assert result.error.kind is OrderErrorKind.VALIDATION
        assert "deliveryAddress.street" in result.error.field_errors
        assert gateway.requests == []

    def test_saved_address(self):
        handler, _, _, _, address_book = _setup()
        address_book.address = make_address(city="Pokhara")
        assert handler.saved_address().city == "Pokhara"


class TestOnlinePayment:

    def test_creates_pending_order_then_redirects(self):
        handler, store, gateway, navigator, _ = _setup()
        initiation = handler.start_online_payment(make_address())

        assert initiation.redirected
        (request,) = gateway.requests
        assert request.payment_method is PaymentMethod.ESEWA
        assert initiation.payment_request.total_amount == "310"
        assert initiation.payment_request.transaction_uuid.startswith(initiation.order.order_id)
        (action_url, fields), = navigator.submitted
        assert action_url == "https://gateway.test/form"
        assert fields["signature"] == initiation.payment_request.signature

    def test_cart_survives_the_redirect(self):
        handler, store, _, _, _ = _setup()
        handler.start_online_payment(make_address())
        assert store.totals().total_items == 3

    def test_order_failure_means_no_redirect(self):
        failure = PlaceOrderResult.failed(OrderErrorKind.AUTH, "log in", status_code=401)
        handler, _, _, navigator, _ = _setup(failure)
        initiation = handler.start_online_payment(make_address())

        assert not initiation.redirected
        assert initiation.order.error.kind is OrderErrorKind.AUTH
        assert navigator.submitted == []

    def test_requires_payment_builder(self):
        store = CartStore(InMemoryCartRepository())
        handler = CheckoutHandler(store, FakeOrderGateway())
        with pytest.raises(RuntimeError, match="payment builder"):
            handler.start_online_payment(make_address())
