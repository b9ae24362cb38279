from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


@dataclass
class ProductDTO:
    id: int
    name: str
    price: Decimal
    stock: int


@dataclass(frozen=True)
class StockLevel:
    """Point-in-time read of a product's stock together with its version stamp."""

    product_id: int
    stock: int
    version: int


@dataclass(frozen=True)
class StockRequest:
    product_id: int
    quantity: int


@dataclass(frozen=True)
class Shortfall:
    product_id: int
    requested: int
    available: int

    @property
    def short_by(self) -> int:
        return self.requested - self.available


@dataclass
class ReservationResult:
    ok: bool
    shortfalls: List[Shortfall] = field(default_factory=list)
    attempts: int = 1
