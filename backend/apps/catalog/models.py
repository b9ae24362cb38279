from django.db import models
from django.db.models import Q

# Upper bounds of PositiveIntegerField and AutoField on every supported backend.
MAX_QUANTITY = 2147483647
MAX_PRODUCT_ID = 2147483647


class Product(models.Model):
    id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(max_digits=10, decimal_places=2)
    # Only the inventory ledger writes stock/version; every write bumps version.
    stock = models.PositiveIntegerField(default=0)
    version = models.PositiveIntegerField(default=1)

    def __str__(self):
        return self.name

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(stock__gte=0), name="product_stock_non_negative"
            ),
            models.CheckConstraint(
                condition=Q(price__gte=0), name="product_price_non_negative"
            ),
        ]
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
        ]
