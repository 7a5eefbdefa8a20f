"""Tests for building and submitting the signed payment form."""

import random
import re
from datetime import datetime, timezone

import pytest

from harvest.application.payment_request_builder import PaymentRequestBuilder
from harvest.domain.exceptions import ValidationError
from harvest.domain.model.payment import SIGNED_REQUEST_FIELDS
from harvest.domain.model.value_objects import Money
from harvest.domain.service.signature import verify
from tests.fakes import SECRET, RecordingNavigator

ORDER_ID = "64b7f0c2a1e4d3b2c1a09f99"
FORM_URL = "https://rc-epay.esewa.com.np/api/epay/main/v2/form"


def _builder(navigator: RecordingNavigator | None = None) -> PaymentRequestBuilder:
    return PaymentRequestBuilder(
        secret=SECRET,
        product_code="EPAYTEST",
        form_url=FORM_URL,
        success_url="http://localhost:4200/payment/success",
        failure_url="http://localhost:4200/payment/failure",
        navigator=navigator or RecordingNavigator(),
        clock=lambda: datetime(2025, 6, 10, 16, 24, 13, tzinfo=timezone.utc),
        rng=random.Random(7),
    )


class TestBuild:

    def test_amount_breakdown(self):
        request = _builder().build(ORDER_ID, Money.of("310"))
        assert request.amount == "310"
        assert request.total_amount == "310"
        assert request.tax_amount == "0"
        assert request.product_service_charge == "0"
        assert request.product_delivery_charge == "0"
        assert request.product_code == "EPAYTEST"

    def test_signed_field_names_are_the_fixed_order(self):
        request = _builder().build(ORDER_ID, Money.of("310"))
        assert request.signed_field_names == "total_amount,transaction_uuid,product_code"

    def test_signature_verifies_over_signed_fields(self):
        request = _builder().build(ORDER_ID, Money.of("99.50"))
        assert verify(request.signature, request.form_fields(), SECRET, SIGNED_REQUEST_FIELDS)

    def test_transaction_uuid_shape(self):
        request = _builder().build(ORDER_ID, Money.of("310"))
        assert re.fullmatch(rf"{ORDER_ID}-250610-162413-[A-Z0-9]{{6}}", request.transaction_uuid)

    def test_retries_get_fresh_transaction_ids(self):
        builder = _builder()
        first = builder.build(ORDER_ID, Money.of("310"))
        second = builder.build(ORDER_ID, Money.of("310"))
        assert first.transaction_uuid != second.transaction_uuid
        assert first.signature != second.signature

    def test_product_code_override(self):
        request = _builder().build(ORDER_ID, Money.of("310"), product_code="MERCHANT2")
        assert request.product_code == "MERCHANT2"

    def test_zero_amount_rejected(self):
        with pytest.raises(ValidationError, match="greater than zero"):
            _builder().build(ORDER_ID, Money.zero())

    def test_missing_order_id_rejected(self):
        with pytest.raises(ValidationError, match="order id"):
            _builder().build(" ", Money.of("10"))

    def test_build_does_not_navigate(self):
        navigator = RecordingNavigator()
        _builder(navigator).build(ORDER_ID, Money.of("310"))
        assert navigator.submitted == []


class TestSubmit:

    def test_submit_posts_every_form_field(self):
        navigator = RecordingNavigator()
        builder = _builder(navigator)
        request = builder.build(ORDER_ID, Money.of("310"))
        builder.submit(request)

        (action_url, fields), = navigator.submitted
        assert action_url == FORM_URL
        assert list(fields) == [
            "amount",
            "tax_amount",
            "total_amount",
            "transaction_uuid",
            "product_code",
            "product_service_charge",
            "product_delivery_charge",
            "success_url",
            "failure_url",
            "signed_field_names",
            "signature",
        ]
