from typing import Dict, Iterable, Tuple

from django.db import transaction
from django.db.models import F

from apps.common.repository import GenericRepository
from .dtos import StockLevel
from .models import MAX_QUANTITY, Product


class _StaleStockRow(Exception):
    """Raised inside the decrement transaction to roll the whole batch back."""

    def __init__(self, product_id: int):
        super().__init__(product_id)
        self.product_id = product_id


class ProductRepository(GenericRepository[Product]):
    def __init__(self):
        super().__init__(Product)

    def stock_levels(self, product_ids: Iterable[int]) -> Dict[int, StockLevel]:
        rows = (
            self.model.objects.filter(id__in=list(product_ids))
            .order_by("id")
            .values_list("id", "stock", "version")
        )
        return {
            pid: StockLevel(product_id=pid, stock=stock, version=version)
            for pid, stock, version in rows
        }

    def apply_decrements(self, plan: Iterable[Tuple[int, int, int]]) -> bool:
        """
        Conditionally decrement every row of ``plan`` inside one transaction.

        Each row is ``(product_id, expected_version, quantity)``. Rows are written
        in ascending product id order so that overlapping batches take row locks
        in the same order. A row whose version moved (or whose stock no longer
        covers the quantity) aborts and rolls back the entire batch.
        """
        ordered = sorted(plan, key=lambda row: row[0])
        try:
            with transaction.atomic():
                for product_id, version, quantity in ordered:
                    updated = self.model.objects.filter(
                        id=product_id, version=version, stock__gte=quantity
                    ).update(
                        stock=F("stock") - quantity,
                        version=F("version") + 1,
                    )
                    if updated != 1:
                        raise _StaleStockRow(product_id)
        except _StaleStockRow:
            return False
        return True

    def increment_stock(self, product_id: int, quantity: int) -> bool:
        # The ceiling guard keeps the sum inside the column range.
        updated = self.model.objects.filter(
            id=product_id, stock__lte=MAX_QUANTITY - quantity
        ).update(
            stock=F("stock") + quantity,
            version=F("version") + 1,
        )
        return updated == 1
