"""Product reference.

Products are owned by the external catalog service. The cart only ever
holds a read-only snapshot of the fields it needs to price a line and
clamp its quantity.
"""

from __future__ import annotations

from dataclasses import dataclass

from harvest.domain.exceptions import ValidationError
from harvest.domain.model.value_objects import Money


@dataclass(frozen=True)
class ProductRef:
    """Snapshot of a catalog product at the moment it was added to the cart."""

    id: str
    name: str
    price: Money
    available_stock: int

    def __post_init__(self) -> None:
        if not self.id or not str(self.id).strip():
            raise ValidationError("Product identifier is required")
        if not isinstance(self.available_stock, int) or self.available_stock < 0:
            raise ValidationError(
                f"Available stock for {self.name} must be a non-negative integer"
            )
