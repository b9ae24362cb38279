from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Protocol, Tuple

from apps.catalog.protocols import ProductRepositoryProtocol

if TYPE_CHECKING:
    from apps.carts.models import LineItem
    from apps.catalog.dtos import ReservationResult, StockRequest


class LineItemRepositoryProtocol(Protocol):
    def list_for_user(self, user_id: int) -> Iterable["LineItem"]:
        ...

    def quantity_of(self, user_id: int, product_id: int) -> int:
        ...

    def add_quantity(self, user_id: int, product_id: int, quantity: int) -> "LineItem":
        """Insert the line item or increase its quantity when it already exists."""
        ...

    def delete_product(self, user_id: int, product_id: int) -> int:
        ...

    def delete_for_user(self, user_id: int) -> int:
        ...

    def consume(self, user_id: int, items: Iterable[Tuple[int, int]]) -> int:
        ...


class InventoryLedgerProtocol(Protocol):
    def reserve_and_decrement(
        self, requests: Iterable["StockRequest"]
    ) -> "ReservationResult":
        ...


class CartStoreProtocol(Protocol):
    def snapshot(self, user_id: int):
        ...

    def reset(self, user_id: int) -> int:
        ...

    def consume(self, user_id: int, items: Iterable[Tuple[int, int]]) -> int:
        ...


__all__ = [
    "CartStoreProtocol",
    "InventoryLedgerProtocol",
    "LineItemRepositoryProtocol",
    "ProductRepositoryProtocol",
]

