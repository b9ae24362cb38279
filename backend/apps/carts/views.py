from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.schemas import ErrorResponseSerializer, InsufficientStockResponseSerializer
from apps.common import get_logger
from .container import build_cart_store, build_checkout_coordinator
from .serializers import (
    CartItemWriteSerializer,
    CartReadSerializer,
    CartResetSerializer,
    CheckoutReceiptSerializer,
)

logger = get_logger(__name__).bind(component="carts", layer="view")


def _actor_id(request) -> int:
    # IsAuthenticated guarantees a user; the identity service owns who that is.
    return int(request.user.id)


@extend_schema(tags=["Cart"])
class CartView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_store()
    log = logger.bind(view="CartView")

    @extend_schema(
        summary="List cart",
        description="Current line items with live names and prices, plus the computed total.",
        responses={200: CartReadSerializer},
    )
    def get(self, request):
        user_id = _actor_id(request)
        self.log.debug("Listing cart", user_id=user_id)
        snapshot = self.service.snapshot(user_id)
        return Response(CartReadSerializer(snapshot).data)


@extend_schema(tags=["Cart"])
class CartResetView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_store()
    log = logger.bind(view="CartResetView")

    @extend_schema(
        summary="Create or reset cart",
        description="Removes every line item for the authenticated user. Safe to repeat.",
        request=None,
        responses={200: CartResetSerializer},
    )
    def post(self, request):
        user_id = _actor_id(request)
        removed = self.service.reset(user_id)
        self.log.info("Cart reset via API", user_id=user_id, items_removed=removed)
        return Response(CartResetSerializer({"itemsRemoved": removed}).data)


@extend_schema(tags=["Cart"])
class CartItemListView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_store()
    log = logger.bind(view="CartItemListView")

    @extend_schema(
        summary="Add item to cart",
        description=(
            "Adds a product to the cart, merging into an existing line item for the "
            "same product. Stock is not reserved until checkout."
        ),
        request=CartItemWriteSerializer,
        responses={
            200: CartReadSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        serializer = CartItemWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user_id = _actor_id(request)
        product_id = serializer.validated_data["product_id"]
        quantity = serializer.validated_data["quantity"]
        self.log.info(
            "Adding item via API", user_id=user_id, product_id=product_id, quantity=quantity
        )
        snapshot = self.service.add_item(user_id, product_id, quantity)
        return Response(CartReadSerializer(snapshot).data)


@extend_schema(tags=["Cart"])
class CartItemDetailView(APIView):
    permission_classes = [IsAuthenticated]
    service = build_cart_store()
    log = logger.bind(view="CartItemDetailView")

    @extend_schema(
        summary="Remove item from cart",
        parameters=[OpenApiParameter("product_id", int, OpenApiParameter.PATH)],
        responses={
            204: None,
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def delete(self, request, product_id: int):
        user_id = _actor_id(request)
        product_id = int(product_id)
        self.log.info("Removing item via API", user_id=user_id, product_id=product_id)
        self.service.remove_item(user_id, product_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema(tags=["Checkout"])
class CheckoutView(APIView):
    permission_classes = [IsAuthenticated]
    coordinator = build_checkout_coordinator()
    log = logger.bind(view="CheckoutView")

    @extend_schema(
        summary="Checkout cart",
        description=(
            "Takes stock for every line item as one all-or-nothing unit and clears the "
            "cart. On a shortfall nothing is taken and the cart is kept; the error lists "
            "each short product with shortBy."
        ),
        request=None,
        responses={
            200: CheckoutReceiptSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            409: OpenApiResponse(response=InsufficientStockResponseSerializer),
            500: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request):
        user_id = _actor_id(request)
        self.log.info("Checkout requested", user_id=user_id)
        receipt = self.coordinator.checkout(user_id)
        return Response(CheckoutReceiptSerializer(receipt).data)
