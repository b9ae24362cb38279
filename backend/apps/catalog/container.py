from __future__ import annotations

from django.conf import settings

from .mappers import ProductMapper
from .repositories import ProductRepository
from .services import DEFAULT_MAX_ATTEMPTS, InventoryLedger


def build_inventory_ledger() -> InventoryLedger:
    return InventoryLedger(
        products=ProductRepository(),
        max_attempts=getattr(settings, "INVENTORY_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
        product_mapper=ProductMapper(),
    )
