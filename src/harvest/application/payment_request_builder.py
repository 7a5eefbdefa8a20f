"""Application service: build and submit the signed payment form.

Building has no side effects beyond generating a transaction id.
Submitting hands the form to the navigator, which leaves the
application; control only comes back through the gateway's return URL.
"""

from __future__ import annotations

import logging
import random
import secrets
import string
from datetime import datetime, timezone
from typing import Callable

from harvest.domain.exceptions import ValidationError
from harvest.domain.gateway.navigator import Navigator
from harvest.domain.model.payment import SIGNED_REQUEST_FIELDS, PaymentRequest
from harvest.domain.model.value_objects import Money
from harvest.domain.service.signature import sign

log = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits
_SUFFIX_LENGTH = 6


class PaymentRequestBuilder:

    def __init__(
        self,
        secret: str,
        product_code: str,
        form_url: str,
        success_url: str,
        failure_url: str,
        navigator: Navigator,
        clock: Callable[[], datetime] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._secret = secret
        self._product_code = product_code
        self._form_url = form_url
        self._success_url = success_url
        self._failure_url = failure_url
        self._navigator = navigator
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._rng = rng or secrets.SystemRandom()

    def build(
        self,
        order_id: str,
        total_amount: Money,
        product_code: str | None = None,
    ) -> PaymentRequest:
        """Build a signed request for *total_amount* against *order_id*.

        A fresh transaction id is generated on every call so a retried
        payment never collides with an earlier attempt.
        """
        if not order_id or not order_id.strip():
            raise ValidationError("An order id is required to start a payment")
        if total_amount.is_zero:
            raise ValidationError("Payment amount must be greater than zero")

        fields = {
            "total_amount": total_amount.to_plain_string(),
            "transaction_uuid": self.new_transaction_uuid(order_id),
            "product_code": product_code or self._product_code,
        }
        signature = sign(fields, self._secret, SIGNED_REQUEST_FIELDS)

        return PaymentRequest(
            action_url=self._form_url,
            amount=fields["total_amount"],
            tax_amount="0",
            total_amount=fields["total_amount"],
            transaction_uuid=fields["transaction_uuid"],
            product_code=fields["product_code"],
            product_service_charge="0",
            product_delivery_charge="0",
            success_url=self._success_url,
            failure_url=self._failure_url,
            signed_field_names=",".join(SIGNED_REQUEST_FIELDS),
            signature=signature,
        )

    def submit(self, request: PaymentRequest) -> None:
        log.info(
            "Redirecting to payment gateway for transaction %s (amount %s)",
            request.transaction_uuid,
            request.total_amount,
        )
        self._navigator.submit_form(request.action_url, request.form_fields())

    def new_transaction_uuid(self, order_id: str) -> str:
        """``<order id>-<yymmdd-HHMMSS>-<random suffix>``."""
        stamp = self._clock().strftime("%y%m%d-%H%M%S")
        suffix = "".join(self._rng.choice(_SUFFIX_ALPHABET) for _ in range(_SUFFIX_LENGTH))
        return f"{order_id.strip()}-{stamp}-{suffix}"
