"""JSON-file-backed implementation of CartRepository.

The whole cart is one record under the ``"cart"`` key of a single file,
rewritten after every mutation.
"""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from pathlib import Path

from harvest.domain.exceptions import CorruptCartError, ValidationError
from harvest.domain.model.cart import Cart, CartLine
from harvest.domain.model.product import ProductRef
from harvest.domain.model.value_objects import DEFAULT_CURRENCY, Money
from harvest.domain.repository.cart_repository import CartRepository

STORAGE_KEY = "cart"


class JsonCartRepository(CartRepository):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    # --- CartRepository interface ---------------------------------------------

    def load(self) -> Cart:
        if not self._file_path.exists():
            return Cart()
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            raise CorruptCartError(f"Cannot read {self._file_path}: {exc}") from exc

        try:
            return self._to_domain(raw)
        except (
            KeyError,
            TypeError,
            AttributeError,
            InvalidOperation,
            ValidationError,
        ) as exc:
            raise CorruptCartError(f"Malformed cart record in {self._file_path}: {exc}") from exc

    def save(self, cart: Cart) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        self._file_path.write_text(
            json.dumps(self._to_raw(cart), indent=2) + "\n", encoding="utf-8"
        )

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(cart: Cart) -> dict:
        return {
            STORAGE_KEY: [
                {
                    "product": {
                        "id": line.product.id,
                        "name": line.product.name,
                        "price": str(line.product.price.amount),
                        "currency": line.product.price.currency,
                        "available_stock": line.product.available_stock,
                    },
                    "quantity": line.quantity,
                }
                for line in cart.lines
            ]
        }

    @staticmethod
    def _to_domain(raw: dict) -> Cart:
        lines = []
        for item in raw[STORAGE_KEY]:
            product = item["product"]
            lines.append(
                CartLine(
                    product=ProductRef(
                        id=str(product["id"]),
                        name=product["name"],
                        price=Money(
                            Decimal(str(product["price"])),
                            product.get("currency", DEFAULT_CURRENCY),
                        ),
                        available_stock=product["available_stock"],
                    ),
                    quantity=item["quantity"],
                )
            )
        return Cart(lines=lines)
