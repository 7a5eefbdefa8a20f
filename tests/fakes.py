"""In-memory fakes and builders for testing.

The fakes implement the same abstract interfaces as the JSON
repositories and the HTTP gateway but keep everything in memory.
No file I/O, no network.
"""

from __future__ import annotations

import base64
import json
from typing import Mapping

from harvest.domain.exceptions import CorruptCartError, CorruptLedgerError
from harvest.domain.gateway.navigator import Navigator
from harvest.domain.gateway.order_gateway import OrderGateway
from harvest.domain.model.cart import Cart, CartLine
from harvest.domain.model.order import DeliveryAddress, OrderRequest, PlaceOrderResult
from harvest.domain.model.product import ProductRef
from harvest.domain.model.value_objects import Money
from harvest.domain.repository.address_book import AddressBook
from harvest.domain.repository.cart_repository import CartRepository
from harvest.domain.repository.transaction_ledger import TransactionLedger
from harvest.domain.service.signature import sign

SECRET = "8gBm/:&EnhH.1/q"
PRODUCT_A = "64b7f0c2a1e4d3b2c1a09f81"
PRODUCT_B = "64b7f0c2a1e4d3b2c1a09f82"


def make_product(
    product_id: str = PRODUCT_A,
    name: str = "Tomatoes",
    price: str = "80",
    stock: int = 10,
) -> ProductRef:
    return ProductRef(id=product_id, name=name, price=Money.of(price), available_stock=stock)


def make_address(**overrides: str) -> DeliveryAddress:
    values = {
        "province": "Bagmati",
        "city": "Kathmandu",
        "street": "Baneshwor 10",
        "phone": "9800000000",
    }
    values.update(overrides)
    return DeliveryAddress(**values)


def callback_fields(
    status: str = "COMPLETE",
    total_amount: str = "310.0",
    transaction_uuid: str = "64b7f0c2a1e4d3b2c1a09f99-250610-162413-AB12CD",
) -> dict[str, str]:
    return {
        "transaction_code": "000AWEO",
        "status": status,
        "total_amount": total_amount,
        "transaction_uuid": transaction_uuid,
        "product_code": "EPAYTEST",
        "signed_field_names": (
            "transaction_code,status,total_amount,transaction_uuid,product_code,signed_field_names"
        ),
    }


def signed_payload(fields: Mapping[str, str], secret: str = SECRET) -> dict[str, str]:
    names = fields["signed_field_names"].split(",")
    return {**fields, "signature": sign(fields, secret, names)}


def encode_payload(payload: Mapping[str, object]) -> str:
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


class InMemoryCartRepository(CartRepository):

    def __init__(self, lines: list[CartLine] | None = None, corrupt: bool = False) -> None:
        self._lines = list(lines or [])
        self._corrupt = corrupt
        self.save_count = 0
        self.fail_saves = False

    def load(self) -> Cart:
        if self._corrupt:
            raise CorruptCartError("unparseable")
        return Cart(lines=list(self._lines))

    def save(self, cart: Cart) -> None:
        if self.fail_saves:
            raise OSError(28, "No space left on device")
        self._lines = list(cart.lines)
        self.save_count += 1

    @property
    def stored_lines(self) -> list[CartLine]:
        return list(self._lines)


class InMemoryTransactionLedger(TransactionLedger):

    def __init__(self, corrupt: bool = False, fail_writes: bool = False) -> None:
        self.recorded: list[str] = []
        self._corrupt = corrupt
        self._fail_writes = fail_writes

    def contains(self, transaction_uuid: str) -> bool:
        if self._corrupt:
            raise CorruptLedgerError("unparseable")
        return transaction_uuid in self.recorded

    def record(self, transaction_uuid: str) -> None:
        if self._fail_writes:
            raise OSError(13, "Permission denied")
        self.recorded.append(transaction_uuid)


class FakeOrderGateway(OrderGateway):

    def __init__(self, result: PlaceOrderResult | None = None) -> None:
        self._result = result or PlaceOrderResult.ok("64b7f0c2a1e4d3b2c1a09f99")
        self.requests: list[OrderRequest] = []

    def place_order(self, request: OrderRequest) -> PlaceOrderResult:
        self.requests.append(request)
        return self._result


class RecordingNavigator(Navigator):

    def __init__(self) -> None:
        self.submitted: list[tuple[str, dict[str, str]]] = []
        self.replaced: list[str] = []

    def submit_form(self, action_url: str, fields: Mapping[str, str]) -> None:
        self.submitted.append((action_url, dict(fields)))

    def replace_url(self, url: str) -> None:
        self.replaced.append(url)


class InMemoryAddressBook(AddressBook):

    def __init__(self, address: DeliveryAddress | None = None) -> None:
        self.address = address

    def load(self) -> DeliveryAddress | None:
        return self.address

    def save(self, address: DeliveryAddress) -> None:
        self.address = address


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
