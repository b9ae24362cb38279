from typing import Iterable, List, Optional

from .dtos import CartSnapshotDTO, CheckoutReceiptDTO, LineItemDTO
from .models import LineItem


class LineItemMapper:
    def to_dto(self, item: LineItem) -> LineItemDTO:
        product = item.product
        return LineItemDTO(
            product_id=item.product_id,
            name=product.name,
            quantity=item.quantity,
            price=product.price,
        )

    def many_to_dto(self, items: Iterable[LineItem]) -> List[LineItemDTO]:
        return [self.to_dto(i) for i in items]


class CartMapper:
    def __init__(self, line_item_mapper: Optional[LineItemMapper] = None) -> None:
        self.line_item_mapper = line_item_mapper or LineItemMapper()

    def to_snapshot(self, user_id: int, items: Iterable[LineItem]) -> CartSnapshotDTO:
        return CartSnapshotDTO(
            user_id=user_id, items=self.line_item_mapper.many_to_dto(items)
        )

    @staticmethod
    def to_receipt(snapshot: CartSnapshotDTO) -> CheckoutReceiptDTO:
        return CheckoutReceiptDTO(
            user_id=snapshot.user_id,
            items=list(snapshot.items),
            total_charged=snapshot.total,
        )
