"""Payment gateway request/response model.

The outbound request is an HTML form posted to the wallet gateway; the
inbound response is a base64 JSON document appended to the return URL.
Both carry an HMAC signature over a named, ordered subset of fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

from harvest.domain.exceptions import InvalidCallbackError

SIGNED_REQUEST_FIELDS = ("total_amount", "transaction_uuid", "product_code")


class PaymentOutcome(Enum):
    """Status reported by the gateway. Only PENDING is non-terminal."""

    COMPLETE = "COMPLETE"
    PENDING = "PENDING"
    CANCELED = "CANCELED"
    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS = "AMBIGUOUS"
    FULL_REFUND = "FULL_REFUND"
    PARTIAL_REFUND = "PARTIAL_REFUND"

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentOutcome.PENDING

    @staticmethod
    def parse(status: str) -> PaymentOutcome | None:
        normalized = status.strip().upper()
        # Some gateway builds spell it the British way.
        if normalized == "CANCELLED":
            normalized = "CANCELED"
        try:
            return PaymentOutcome(normalized)
        except ValueError:
            return None


@dataclass(frozen=True)
class PaymentRequest:
    """A complete, signed outbound payment form."""

    action_url: str
    amount: str
    tax_amount: str
    total_amount: str
    transaction_uuid: str
    product_code: str
    product_service_charge: str
    product_delivery_charge: str
    success_url: str
    failure_url: str
    signed_field_names: str
    signature: str

    def form_fields(self) -> dict[str, str]:
        return {
            "amount": self.amount,
            "tax_amount": self.tax_amount,
            "total_amount": self.total_amount,
            "transaction_uuid": self.transaction_uuid,
            "product_code": self.product_code,
            "product_service_charge": self.product_service_charge,
            "product_delivery_charge": self.product_delivery_charge,
            "success_url": self.success_url,
            "failure_url": self.failure_url,
            "signed_field_names": self.signed_field_names,
            "signature": self.signature,
        }


_REQUIRED_CALLBACK_FIELDS = (
    "status",
    "total_amount",
    "transaction_uuid",
    "product_code",
    "signed_field_names",
    "signature",
)


@dataclass(frozen=True)
class PaymentCallback:
    """Decoded gateway response.

    ``fields`` keeps every decoded value as the exact text the gateway
    sent, because the signature is computed over that text.
    """

    transaction_code: str
    status: str
    total_amount: str
    transaction_uuid: str
    product_code: str
    signed_field_names: str
    signature: str
    fields: Mapping[str, str] = field(default_factory=dict)

    @property
    def signed_fields(self) -> list[str]:
        return [name.strip() for name in self.signed_field_names.split(",") if name.strip()]

    @property
    def outcome(self) -> PaymentOutcome | None:
        return PaymentOutcome.parse(self.status)

    @staticmethod
    def from_mapping(raw: object) -> PaymentCallback:
        if not isinstance(raw, dict):
            raise InvalidCallbackError("Payment response is not a JSON object")

        values = {str(k): _as_text(v) for k, v in raw.items()}
        missing = [name for name in _REQUIRED_CALLBACK_FIELDS if not values.get(name)]
        if missing:
            raise InvalidCallbackError(
                f"Payment response is missing {', '.join(missing)}"
            )

        return PaymentCallback(
            transaction_code=values.get("transaction_code", ""),
            status=values["status"],
            total_amount=values["total_amount"],
            transaction_uuid=values["transaction_uuid"],
            product_code=values["product_code"],
            signed_field_names=values["signed_field_names"],
            signature=values["signature"],
            fields=values,
        )


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------------
# Processing result
# ---------------------------------------------------------------------------


class CallbackResultKind(Enum):
    SUCCESS = "success"
    PAYMENT_NOT_COMPLETED = "payment_not_completed"
    VERIFICATION_FAILED = "verification_failed"
    INVALID_RESPONSE = "invalid_response"
    UNSIGNED_SUCCESS = "unsigned_success"
    UNSIGNED_FAILURE = "unsigned_failure"
    DUPLICATE = "duplicate"
    LEDGER_UNAVAILABLE = "ledger_unavailable"
    NO_CALLBACK = "no_callback"


@dataclass(frozen=True)
class CallbackResult:
    kind: CallbackResultKind
    message: str
    outcome: PaymentOutcome | None = None
    callback: PaymentCallback | None = None
    cart_cleared: bool = False
    trusted: bool = True
    clean_url: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.kind in (CallbackResultKind.SUCCESS, CallbackResultKind.UNSIGNED_SUCCESS)
