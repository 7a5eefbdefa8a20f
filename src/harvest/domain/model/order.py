"""Order submission model.

Orders themselves are owned by the marketplace backend and referenced
here by identifier only. What the client owns is the immutable
``OrderRequest`` built from the cart at submission time, and the
structured result of submitting it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from harvest.domain.exceptions import ValidationError
from harvest.domain.model.cart import CartLine
from harvest.domain.model.value_objects import Quantity

# The backend keys products by 24-hex-digit object ids.
PRODUCT_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{24}$")


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"
    ESEWA = "esewa"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryAddress:
    province: str
    city: str
    street: str
    phone: str

    def missing_fields(self) -> dict[str, str]:
        """Return ``{field path: message}`` for every blank field."""
        errors: dict[str, str] = {}
        for name in ("province", "city", "street", "phone"):
            value = getattr(self, name)
            if not value or not value.strip():
                errors[f"deliveryAddress.{name}"] = f"Please enter {name}"
        return errors

    def to_payload(self) -> dict:
        return {
            "province": self.province.strip(),
            "city": self.city.strip(),
            "street": self.street.strip(),
            "phone": self.phone.strip(),
        }


@dataclass(frozen=True)
class OrderLine:
    product_id: str
    quantity: Quantity


@dataclass(frozen=True)
class OrderRequest:
    """What gets sent to ``POST /orders``. Immutable once built."""

    lines: tuple[OrderLine, ...]
    delivery_address: DeliveryAddress
    payment_method: PaymentMethod
    payment_status: PaymentStatus = PaymentStatus.PENDING

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def from_cart(
        cart_lines: Sequence[CartLine],
        delivery_address: DeliveryAddress,
        payment_method: PaymentMethod,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
    ) -> OrderRequest:
        """Build a request from a cart snapshot, enforcing submission rules."""
        if not cart_lines:
            raise ValidationError("Your cart is empty")

        missing = delivery_address.missing_fields()
        if missing:
            raise ValidationError("Delivery address is incomplete", missing)

        lines = tuple(
            OrderLine(product_id=str(line.product_id), quantity=Quantity(line.quantity))
            for line in cart_lines
        )
        return OrderRequest(
            lines=lines,
            delivery_address=delivery_address,
            payment_method=payment_method,
            payment_status=payment_status,
        )

    # --- Queries --------------------------------------------------------------

    def invalid_product_ids(self) -> dict[str, str]:
        """Per-field errors for product ids the backend would reject."""
        errors: dict[str, str] = {}
        for i, line in enumerate(self.lines):
            if not PRODUCT_ID_PATTERN.match(line.product_id):
                errors[f"products[{i}].productId"] = (
                    f"'{line.product_id}' is not a valid product identifier"
                )
        return errors

    def to_payload(self) -> dict:
        return {
            "products": [
                {"productId": line.product_id, "quantity": line.quantity.value}
                for line in self.lines
            ],
            "deliveryAddress": self.delivery_address.to_payload(),
            "paymentMethod": self.payment_method.value,
            "paymentStatus": self.payment_status.value,
        }


# ---------------------------------------------------------------------------
# Submission result
# ---------------------------------------------------------------------------


class OrderErrorKind(Enum):
    VALIDATION = "validation"
    CONNECTIVITY = "connectivity"
    AUTH = "auth"
    SERVER = "server"


@dataclass(frozen=True)
class OrderError:
    kind: OrderErrorKind
    message: str
    field_errors: dict[str, str] = field(default_factory=dict)
    status_code: int | None = None


@dataclass(frozen=True)
class PlaceOrderResult:
    """Either an ``order_id`` or an ``error``, never both."""

    order_id: str | None = None
    error: OrderError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.order_id is not None

    @staticmethod
    def ok(order_id: str) -> PlaceOrderResult:
        return PlaceOrderResult(order_id=order_id)

    @staticmethod
    def failed(
        kind: OrderErrorKind,
        message: str,
        field_errors: dict[str, str] | None = None,
        status_code: int | None = None,
    ) -> PlaceOrderResult:
        return PlaceOrderResult(
            error=OrderError(
                kind=kind,
                message=message,
                field_errors=dict(field_errors or {}),
                status_code=status_code,
            )
        )
