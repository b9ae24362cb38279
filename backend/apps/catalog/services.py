from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple, Union

from apps.api.exceptions import ApplicationError
from apps.common import get_logger
from .dtos import ProductDTO, ReservationResult, Shortfall, StockRequest
from .mappers import ProductMapper
from .models import MAX_PRODUCT_ID, MAX_QUANTITY
from .protocols import ProductRepositoryProtocol

logger = get_logger(__name__).bind(component="catalog", layer="service")

DEFAULT_MAX_ATTEMPTS = 5

StockRequestLike = Union[StockRequest, Tuple[int, int]]


class ProductNotFoundError(ApplicationError):
    """Raised when a referenced product does not exist in the catalog."""

    default_code = "NOT_FOUND"

    def __init__(self, product_ids: Iterable[int]):
        ids = sorted(set(product_ids))
        noun = "Product" if len(ids) == 1 else "Products"
        super().__init__(
            message=f"{noun} not found",
            details={"productIds": ids},
        )
        self.product_ids = ids


class InvalidQuantityError(ApplicationError):
    """Raised for quantities below one or otherwise malformed stock requests."""

    default_code = "VALIDATION_ERROR"

    def __init__(self, message: str, *, details=None):
        super().__init__(message=message, details=details)


class StockConflictError(ApplicationError):
    """Raised when concurrent writers kept winning until the retry budget ran out."""

    default_code = "CONFLICT"

    def __init__(self, product_ids: Iterable[int], attempts: int):
        ids = sorted(product_ids)
        super().__init__(
            message="Stock changed concurrently; checkout was not applied",
            details={"productIds": ids, "attempts": attempts},
            hint="Retry the checkout; no stock was taken.",
        )
        self.product_ids = ids
        self.attempts = attempts


def validate_quantity(quantity, *, field: str = "quantity") -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError(
            f"{field} must be an integer", details={field: quantity}
        )
    if quantity < 1:
        raise InvalidQuantityError(
            f"{field} must be at least 1", details={field: quantity}
        )
    if quantity > MAX_QUANTITY:
        raise InvalidQuantityError(
            f"{field} must be at most {MAX_QUANTITY}", details={field: quantity}
        )
    return quantity


def in_product_id_range(product_id: int) -> bool:
    return 1 <= product_id <= MAX_PRODUCT_ID


def ensure_product_ids_in_range(product_ids: Iterable[int]) -> None:
    # Ids the column cannot hold cannot exist; never send them to the database.
    out_of_range = [pid for pid in product_ids if not in_product_id_range(pid)]
    if out_of_range:
        raise ProductNotFoundError(out_of_range)


class InventoryLedger:
    """
    Sole writer of ``Product.stock``.

    Reservations use optimistic versioning: read ``(stock, version)`` for the
    whole batch, verify every request, then ask the repository to apply all
    decrements conditioned on the versions that were read. The repository
    applies the batch in a single transaction, so a lost race on any product
    leaves every product untouched; the ledger then re-reads and retries, up
    to ``max_attempts`` times.
    """

    def __init__(
        self,
        products: ProductRepositoryProtocol,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        product_mapper: Optional[ProductMapper] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.products = products
        self.max_attempts = max_attempts
        self.product_mapper = product_mapper or ProductMapper()
        self.logger = logger.bind(service="InventoryLedger")

    @staticmethod
    def _merge_requests(requests: Iterable[StockRequestLike]) -> Dict[int, int]:
        merged: Dict[int, int] = {}
        for request in requests:
            if isinstance(request, StockRequest):
                product_id, quantity = request.product_id, request.quantity
            else:
                product_id, quantity = request
            validate_quantity(quantity)
            merged[product_id] = merged.get(product_id, 0) + quantity
        if not merged:
            raise InvalidQuantityError("At least one stock request is required")
        for quantity in merged.values():
            validate_quantity(quantity)
        return dict(sorted(merged.items()))

    def reserve_and_decrement(
        self, requests: Iterable[StockRequestLike]
    ) -> ReservationResult:
        wanted = self._merge_requests(requests)
        product_ids = list(wanted)
        ensure_product_ids_in_range(product_ids)
        for attempt in range(1, self.max_attempts + 1):
            self.logger.debug(
                "Reading stock for reservation",
                product_ids=product_ids,
                attempt=attempt,
            )
            levels = self.products.stock_levels(product_ids)
            missing = [pid for pid in product_ids if pid not in levels]
            if missing:
                self.logger.warning(
                    "Reservation references missing products", product_ids=missing
                )
                raise ProductNotFoundError(missing)

            shortfalls: List[Shortfall] = [
                Shortfall(
                    product_id=pid,
                    requested=quantity,
                    available=levels[pid].stock,
                )
                for pid, quantity in wanted.items()
                if levels[pid].stock < quantity
            ]
            if shortfalls:
                self.logger.warning(
                    "Reservation rejected for insufficient stock",
                    shortfalls={s.product_id: s.short_by for s in shortfalls},
                    attempt=attempt,
                )
                return ReservationResult(
                    ok=False, shortfalls=shortfalls, attempts=attempt
                )

            plan = [
                (pid, levels[pid].version, quantity)
                for pid, quantity in wanted.items()
            ]
            if self.products.apply_decrements(plan):
                self.logger.info(
                    "Stock reserved and decremented",
                    product_ids=product_ids,
                    attempt=attempt,
                )
                return ReservationResult(ok=True, attempts=attempt)
            self.logger.warning(
                "Stock changed during reservation; retrying",
                product_ids=product_ids,
                attempt=attempt,
            )

        self.logger.error(
            "Reservation abandoned after repeated conflicts",
            product_ids=product_ids,
            attempts=self.max_attempts,
        )
        raise StockConflictError(product_ids, self.max_attempts)

    def restock(self, product_id: int, quantity: int) -> ProductDTO:
        validate_quantity(quantity)
        ensure_product_ids_in_range([product_id])
        self.logger.info("Restocking product", product_id=product_id, quantity=quantity)
        if not self.products.increment_stock(product_id, quantity):
            if not self.products.exists(id=product_id):
                self.logger.warning("Restock failed: product missing", product_id=product_id)
                raise ProductNotFoundError([product_id])
            self.logger.warning(
                "Restock rejected: stock would exceed ceiling",
                product_id=product_id,
                quantity=quantity,
            )
            raise InvalidQuantityError(
                f"Stock can hold at most {MAX_QUANTITY} units",
                details={"productId": product_id, "quantity": quantity},
            )
        product = self.products.get(id=product_id)
        if product is None:
            raise ProductNotFoundError([product_id])
        return self.product_mapper.to_dto(product)

    def stock_levels(self, product_ids: Iterable[int]) -> Dict[int, int]:
        return {
            pid: level.stock
            for pid, level in self.products.stock_levels(list(product_ids)).items()
        }
