from __future__ import annotations

from typing import Iterable, Tuple

from apps.api.exceptions import ApplicationError
from apps.catalog.models import MAX_QUANTITY
from apps.catalog.services import (
    InvalidQuantityError,
    ProductNotFoundError,
    ensure_product_ids_in_range,
    in_product_id_range,
    validate_quantity,
)
from apps.common import get_logger
from .dtos import CartSnapshotDTO
from .mappers import CartMapper
from .protocols import LineItemRepositoryProtocol, ProductRepositoryProtocol

logger = get_logger(__name__).bind(component="carts", layer="service")


class LineItemNotFoundError(ApplicationError):
    """Raised when removing a product that is not in the user's cart."""

    default_code = "NOT_FOUND"

    def __init__(self, user_id: int, product_id: int):
        super().__init__(
            message="Item not found in your cart",
            details={"productId": product_id},
        )
        self.user_id = user_id
        self.product_id = product_id


class CartStore:
    """
    Owns each user's line items. Never reads or locks stock: carts are cheap
    and churn freely, and only checkout pays for inventory coordination.
    """

    def __init__(
        self,
        line_items: LineItemRepositoryProtocol,
        products: ProductRepositoryProtocol,
        cart_mapper: CartMapper,
    ):
        self.line_items = line_items
        self.products = products
        self.cart_mapper = cart_mapper
        self.logger = logger.bind(service="CartStore")

    def reset(self, user_id: int) -> int:
        """Remove every line item for the user; returns how many were removed."""
        removed = self.line_items.delete_for_user(user_id)
        self.logger.info("Cart reset", user_id=user_id, items_removed=removed)
        return removed

    def add_item(self, user_id: int, product_id: int, quantity: int) -> CartSnapshotDTO:
        validate_quantity(quantity)
        ensure_product_ids_in_range([product_id])
        if not self.products.exists(id=product_id):
            self.logger.warning(
                "Add to cart failed: product missing",
                user_id=user_id,
                product_id=product_id,
            )
            raise ProductNotFoundError([product_id])
        current = self.line_items.quantity_of(user_id, product_id)
        if current + quantity > MAX_QUANTITY:
            self.logger.warning(
                "Add to cart rejected: merged quantity too large",
                user_id=user_id,
                product_id=product_id,
                current=current,
                added=quantity,
            )
            raise InvalidQuantityError(
                f"quantity in cart must be at most {MAX_QUANTITY}",
                details={"productId": product_id, "inCart": current, "quantity": quantity},
            )
        item = self.line_items.add_quantity(user_id, product_id, quantity)
        self.logger.info(
            "Item added to cart",
            user_id=user_id,
            product_id=product_id,
            added=quantity,
            quantity=item.quantity,
        )
        return self.snapshot(user_id)

    def remove_item(self, user_id: int, product_id: int) -> None:
        if not in_product_id_range(product_id) or not self.line_items.delete_product(
            user_id, product_id
        ):
            self.logger.warning(
                "Remove from cart failed: item missing",
                user_id=user_id,
                product_id=product_id,
            )
            raise LineItemNotFoundError(user_id, product_id)
        self.logger.info("Item removed from cart", user_id=user_id, product_id=product_id)

    def consume(self, user_id: int, items: Iterable[Tuple[int, int]]) -> int:
        """
        Take ``(product_id, quantity)`` pairs out of the cart after checkout.

        Quantity added to a line item after the checkout snapshot stays in the
        cart; returns the number of line items deleted outright.
        """
        items = list(items)
        removed = self.line_items.consume(user_id, items)
        self.logger.info(
            "Checked-out items consumed from cart",
            user_id=user_id,
            line_items=len(items),
            items_removed=removed,
        )
        return removed

    def snapshot(self, user_id: int) -> CartSnapshotDTO:
        items = self.line_items.list_for_user(user_id)
        snapshot = self.cart_mapper.to_snapshot(user_id, items)
        self.logger.debug(
            "Cart snapshot read", user_id=user_id, item_count=len(snapshot.items)
        )
        return snapshot
