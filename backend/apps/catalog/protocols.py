from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Optional, Protocol, Tuple

if TYPE_CHECKING:
    from apps.catalog.dtos import StockLevel
    from apps.catalog.models import Product


class ProductRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional["Product"]:
        ...

    def exists(self, **filters) -> bool:
        ...

    def stock_levels(self, product_ids: Iterable[int]) -> Dict[int, "StockLevel"]:
        ...

    def apply_decrements(self, plan: Iterable[Tuple[int, int, int]]) -> bool:
        """Apply ``(product_id, expected_version, quantity)`` rows as one unit.

        Returns False, with nothing written, when any row's version moved.
        """
        ...

    def increment_stock(self, product_id: int, quantity: int) -> bool:
        """Add stock; False when the product is missing or the sum would pass MAX_QUANTITY."""
        ...
