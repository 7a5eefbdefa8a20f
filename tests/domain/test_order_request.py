"""Unit tests for building an OrderRequest from the cart."""

import pytest

from harvest.domain.exceptions import ValidationError
from harvest.domain.model.cart import Cart
from harvest.domain.model.order import (
    OrderErrorKind,
    OrderRequest,
    PaymentMethod,
    PaymentStatus,
    PlaceOrderResult,
)
from tests.fakes import PRODUCT_A, PRODUCT_B, make_address, make_product


def _cart_lines(*product_ids: str):
    cart = Cart()
    for i, product_id in enumerate(product_ids, start=1):
        cart.add(make_product(product_id, name=f"Item {i}"), i)
    return cart.snapshot()


class TestFromCart:

    def test_payload_matches_backend_contract(self):
        request = OrderRequest.from_cart(
            _cart_lines(PRODUCT_A, PRODUCT_B), make_address(), PaymentMethod.CASH_ON_DELIVERY
        )
        assert request.to_payload() == {
            "products": [
                {"productId": PRODUCT_A, "quantity": 1},
                {"productId": PRODUCT_B, "quantity": 2},
            ],
            "deliveryAddress": {
                "province": "Bagmati",
                "city": "Kathmandu",
                "street": "Baneshwor 10",
                "phone": "9800000000",
            },
            "paymentMethod": "cash_on_delivery",
            "paymentStatus": "pending",
        }

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError, match="cart is empty"):
            OrderRequest.from_cart((), make_address(), PaymentMethod.ESEWA)

    def test_blank_address_fields_reported_per_field(self):
        with pytest.raises(ValidationError) as excinfo:
            OrderRequest.from_cart(
                _cart_lines(PRODUCT_A), make_address(city=" ", phone=""), PaymentMethod.ESEWA
            )
        assert set(excinfo.value.field_errors) == {
            "deliveryAddress.city",
            "deliveryAddress.phone",
        }

    def test_request_is_immutable(self):
        request = OrderRequest.from_cart(
            _cart_lines(PRODUCT_A), make_address(), PaymentMethod.ESEWA, PaymentStatus.PENDING
        )
        with pytest.raises(AttributeError):
            request.payment_method = PaymentMethod.CASH_ON_DELIVERY


class TestProductIdFormat:

    def test_valid_ids_have_no_errors(self):
        request = OrderRequest.from_cart(
            _cart_lines(PRODUCT_A, PRODUCT_B), make_address(), PaymentMethod.ESEWA
        )
        assert request.invalid_product_ids() == {}

    def test_each_bad_id_is_reported_by_position(self):
        request = OrderRequest.from_cart(
            _cart_lines(PRODUCT_A, "42", "not-an-object-id"), make_address(), PaymentMethod.ESEWA
        )
        assert set(request.invalid_product_ids()) == {
            "products[1].productId",
            "products[2].productId",
        }


class TestPlaceOrderResult:

    def test_ok(self):
        result = PlaceOrderResult.ok("abc")
        assert result.succeeded and result.error is None

    def test_failed(self):
        result = PlaceOrderResult.failed(OrderErrorKind.AUTH, "log in", status_code=401)
        assert not result.succeeded
        assert result.error.kind is OrderErrorKind.AUTH
        assert result.error.status_code == 401
