"""Cart aggregate.

The Cart is an aggregate root that owns its lines. Lines are unique by
product identifier and their quantity is always kept within the stock
that was known when the line was last touched.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from harvest.domain.exceptions import ValidationError
from harvest.domain.model.product import ProductRef
from harvest.domain.model.value_objects import Money


@dataclass(frozen=True)
class CartLine:
    """One product-and-quantity entry.

    Frozen so that a tuple of lines is a safe snapshot to hand out to
    subscribers; the cart replaces lines instead of mutating them.
    """

    product: ProductRef
    quantity: int

    def __post_init__(self) -> None:
        if not isinstance(self.quantity, int) or isinstance(self.quantity, bool):
            raise ValidationError("Cart quantity must be an integer")
        if self.quantity <= 0:
            raise ValidationError("Cart quantity must be positive")
        if self.quantity > self.product.available_stock:
            raise ValidationError(
                f"Cannot hold {self.quantity} of {self.product.name} "
                f"(only {self.product.available_stock} in stock)"
            )

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> Money:
        return self.product.price * self.quantity


@dataclass
class Cart:
    """Aggregate root for the shopper's cart.

    The ``__init__`` takes ready-made lines so a repository can
    reconstitute a persisted cart; duplicate product lines are rejected.
    """

    lines: list[CartLine] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for line in self.lines:
            if line.product_id in seen:
                raise ValidationError(
                    f"Duplicate cart line for product '{line.product_id}'"
                )
            seen.add(line.product_id)

    # --- Mutations ------------------------------------------------------------

    def add(self, product: ProductRef, quantity: int = 1) -> int:
        """Add *quantity* units of *product*, merging into an existing line.

        The resulting quantity is clamped to ``product.available_stock``.
        Returns the effective quantity of the line after the call so the
        caller can tell whether clamping happened.
        """
        if quantity <= 0:
            raise ValidationError("Quantity to add must be positive")
        if product.available_stock <= 0:
            raise ValidationError(f"{product.name} is out of stock")

        index = self._index_of(product.id)
        if index is None:
            effective = min(quantity, product.available_stock)
            self.lines.append(CartLine(product=product, quantity=effective))
            return effective

        existing = self.lines[index]
        effective = min(existing.quantity + quantity, product.available_stock)
        # Refresh the snapshot: the stock we just clamped against wins.
        self.lines[index] = CartLine(product=product, quantity=effective)
        return effective

    def remove(self, product_id: str) -> bool:
        """Delete the line for *product_id*. Returns False if there was none."""
        index = self._index_of(product_id)
        if index is None:
            return False
        del self.lines[index]
        return True

    def update_quantity(self, product_id: str, quantity: int) -> int:
        """Set the quantity of an existing line.

        ``quantity <= 0`` removes the line. Quantities above the stock
        snapshot are clamped. Unknown products are ignored. Returns the
        effective quantity (0 when the line is gone or never existed).
        """
        index = self._index_of(product_id)
        if index is None:
            return 0
        if quantity <= 0:
            del self.lines[index]
            return 0

        line = self.lines[index]
        effective = min(quantity, line.product.available_stock)
        self.lines[index] = replace(line, quantity=effective)
        return effective

    def clear(self) -> None:
        self.lines = []

    # --- Queries --------------------------------------------------------------

    def snapshot(self) -> tuple[CartLine, ...]:
        return tuple(self.lines)

    def contains(self, product_id: str) -> bool:
        return self._index_of(product_id) is not None

    def quantity_of(self, product_id: str) -> int:
        index = self._index_of(product_id)
        return 0 if index is None else self.lines[index].quantity

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_price(self) -> Money:
        result = Money.zero()
        for line in self.lines:
            result = result + line.line_total
        return result

    # --- Internal helpers -----------------------------------------------------

    def _index_of(self, product_id: str) -> int | None:
        for i, line in enumerate(self.lines):
            if line.product_id == product_id:
                return i
        return None
