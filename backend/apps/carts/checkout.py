from __future__ import annotations

from typing import List, Optional

from apps.api.exceptions import ApplicationError
from apps.catalog.dtos import Shortfall, StockRequest
from apps.common import get_logger
from .dtos import CheckoutReceiptDTO
from .mappers import CartMapper
from .protocols import CartStoreProtocol, InventoryLedgerProtocol

logger = get_logger(__name__).bind(component="carts", layer="checkout")


class EmptyCartError(ApplicationError):
    default_code = "EMPTY_CART"

    def __init__(self, user_id: int):
        super().__init__(message="Cart is empty")
        self.user_id = user_id


class InsufficientStockError(ApplicationError):
    """Checkout rejected; carries every short product so callers can adjust quantities."""

    default_code = "INSUFFICIENT_STOCK"

    def __init__(self, shortfalls: List[Shortfall]):
        self.shortfalls = list(shortfalls)
        super().__init__(
            message="Not enough stock for one or more products",
            details=[
                {
                    "productId": s.product_id,
                    "requested": s.requested,
                    "available": s.available,
                    "shortBy": s.short_by,
                }
                for s in self.shortfalls
            ],
        )


class CheckoutInconsistencyError(ApplicationError):
    """
    Stock was decremented for the checkout but the cart could not be cleared.

    The decrement is committed; the only safe recovery is clearing the cart
    (``CheckoutCoordinator.clear_after_inconsistency``). Re-running checkout
    would take stock twice.
    """

    default_code = "INCONSISTENT_STATE"

    def __init__(self, receipt: CheckoutReceiptDTO, cause: Optional[BaseException] = None):
        self.receipt = receipt
        self.cause = cause
        super().__init__(
            message="Checkout was charged but the cart could not be cleared",
            details={
                "userId": receipt.user_id,
                "items": [
                    {"productId": item.product_id, "quantity": item.quantity}
                    for item in receipt.items
                ],
                "totalCharged": str(receipt.total_charged),
            },
            hint="Do not retry checkout. Clear the cart with the reconcile_cart command.",
        )


class CheckoutCoordinator:
    """
    Runs one checkout: snapshot the cart, reserve every line item against the
    ledger as a single all-or-nothing batch, then take the charged quantities
    out of the cart. Anything added after the snapshot stays in the cart.

    Shortfalls and ledger conflicts leave stock and cart untouched. Prices in
    the receipt are the ones read in the snapshot; they are not part of the
    ledger's atomic unit and are not re-read after the decrement.
    """

    def __init__(
        self,
        cart_store: CartStoreProtocol,
        ledger: InventoryLedgerProtocol,
        cart_mapper: Optional[CartMapper] = None,
    ):
        self.cart_store = cart_store
        self.ledger = ledger
        self.cart_mapper = cart_mapper or CartMapper()
        self.logger = logger.bind(service="CheckoutCoordinator")

    def checkout(self, user_id: int) -> CheckoutReceiptDTO:
        log = self.logger.bind(user_id=user_id)
        snapshot = self.cart_store.snapshot(user_id)
        if snapshot.is_empty:
            log.info("Checkout rejected: empty cart")
            raise EmptyCartError(user_id)

        requests = [
            StockRequest(product_id=item.product_id, quantity=item.quantity)
            for item in snapshot.items
        ]
        log.debug("Reserving stock for checkout", line_items=len(requests))
        result = self.ledger.reserve_and_decrement(requests)
        if not result.ok:
            log.warning(
                "Checkout rejected: insufficient stock",
                short_products=[s.product_id for s in result.shortfalls],
            )
            raise InsufficientStockError(result.shortfalls)

        receipt = self.cart_mapper.to_receipt(snapshot)
        try:
            self.cart_store.consume(
                user_id, [(item.product_id, item.quantity) for item in receipt.items]
            )
        except Exception as exc:
            log.critical(
                "Stock decremented but cart clear failed; manual reconciliation required",
                exc_info=True,
                items={item.product_id: item.quantity for item in receipt.items},
                total_charged=str(receipt.total_charged),
            )
            raise CheckoutInconsistencyError(receipt, exc) from exc

        log.info(
            "Checkout committed",
            line_items=len(receipt.items),
            total_charged=str(receipt.total_charged),
            attempts=result.attempts,
        )
        return receipt

    def clear_after_inconsistency(self, user_id: int) -> int:
        """Retry only the cart clear for a checkout whose stock is already taken."""
        removed = self.cart_store.reset(user_id)
        self.logger.warning(
            "Cart cleared during reconciliation", user_id=user_id, items_removed=removed
        )
        return removed
