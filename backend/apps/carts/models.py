from django.db import models
from django.db.models import Q

from apps.catalog.models import Product
from apps.users.models import User


class LineItem(models.Model):
    """One product in a user's cart. A user's cart is the set of their line items."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="line_items")
    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="line_items"
    )
    quantity = models.PositiveIntegerField()

    def __str__(self):
        return f"{self.quantity} x product {self.product_id} for user {self.user_id}"

    class Meta:
        db_table = "cart_line_items"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "product"], name="line_item_user_product_uniq"
            ),
            models.CheckConstraint(
                condition=Q(quantity__gte=1), name="line_item_quantity_positive"
            ),
        ]
