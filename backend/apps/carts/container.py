from __future__ import annotations

from apps.catalog.container import build_inventory_ledger
from apps.catalog.repositories import ProductRepository

from .checkout import CheckoutCoordinator
from .mappers import CartMapper, LineItemMapper
from .repositories import LineItemRepository
from .services import CartStore


def build_cart_store() -> CartStore:
    return CartStore(
        line_items=LineItemRepository(),
        products=ProductRepository(),
        cart_mapper=CartMapper(LineItemMapper()),
    )


def build_checkout_coordinator() -> CheckoutCoordinator:
    return CheckoutCoordinator(
        cart_store=build_cart_store(),
        ledger=build_inventory_ledger(),
        cart_mapper=CartMapper(LineItemMapper()),
    )
