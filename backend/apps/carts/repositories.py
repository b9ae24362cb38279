from typing import Iterable, Tuple

from django.db import IntegrityError, transaction
from django.db.models import F

from apps.common.repository import GenericRepository
from .models import LineItem


class LineItemRepository(GenericRepository[LineItem]):
    def __init__(self):
        super().__init__(LineItem)

    def list_for_user(self, user_id: int):
        return (
            self.model.objects.filter(user_id=user_id)
            .select_related("product")
            .order_by("product_id")
        )

    def quantity_of(self, user_id: int, product_id: int) -> int:
        quantity = (
            self.model.objects.filter(user_id=user_id, product_id=product_id)
            .values_list("quantity", flat=True)
            .first()
        )
        return quantity or 0

    def _increment(self, user_id: int, product_id: int, quantity: int) -> bool:
        updated = self.model.objects.filter(
            user_id=user_id, product_id=product_id
        ).update(quantity=F("quantity") + quantity)
        return updated == 1

    def add_quantity(self, user_id: int, product_id: int, quantity: int) -> LineItem:
        if not self._increment(user_id, product_id, quantity):
            try:
                with transaction.atomic():
                    return self.model.objects.create(
                        user_id=user_id, product_id=product_id, quantity=quantity
                    )
            except IntegrityError:
                # Another request inserted the same (user, product) row first.
                if not self._increment(user_id, product_id, quantity):
                    raise
        return self.model.objects.select_related("product").get(
            user_id=user_id, product_id=product_id
        )

    def delete_product(self, user_id: int, product_id: int) -> int:
        deleted, _ = self.model.objects.filter(
            user_id=user_id, product_id=product_id
        ).delete()
        return deleted

    def delete_for_user(self, user_id: int) -> int:
        deleted, _ = self.model.objects.filter(user_id=user_id).delete()
        return deleted

    def consume(self, user_id: int, items: Iterable[Tuple[int, int]]) -> int:
        """
        Subtract checked-out quantities in one transaction.

        A line item holding no more than the checked-out quantity is deleted;
        one that grew after the snapshot keeps the difference.
        """
        removed = 0
        with transaction.atomic():
            for product_id, quantity in sorted(items):
                rows = self.model.objects.filter(user_id=user_id, product_id=product_id)
                deleted, _ = rows.filter(quantity__lte=quantity).delete()
                if deleted:
                    removed += deleted
                    continue
                rows.filter(quantity__gt=quantity).update(
                    quantity=F("quantity") - quantity
                )
        return removed
