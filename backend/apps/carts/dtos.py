from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


@dataclass
class LineItemDTO:
    product_id: int
    name: str
    quantity: int
    price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class CartSnapshotDTO:
    user_id: int
    items: List[LineItemDTO] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.items


@dataclass
class CheckoutReceiptDTO:
    user_id: int
    items: List[LineItemDTO]
    total_charged: Decimal
