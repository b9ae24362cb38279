from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api.schemas import ErrorResponseSerializer
from apps.common import get_logger
from .container import build_inventory_ledger
from .serializers import RestockSerializer, StockLevelSerializer

logger = get_logger(__name__).bind(component="catalog", layer="view")


@extend_schema(tags=["Inventory"])
class ProductRestockView(APIView):
    permission_classes = [IsAdminUser]
    ledger = build_inventory_ledger()
    log = logger.bind(view="ProductRestockView")

    @extend_schema(
        summary="Restock product",
        description=(
            "Adds units to a product's stock. Restricted to staff accounts; stock is "
            "otherwise only reduced by checkout."
        ),
        parameters=[OpenApiParameter("product_id", int, OpenApiParameter.PATH)],
        request=RestockSerializer,
        responses={
            200: StockLevelSerializer,
            400: OpenApiResponse(response=ErrorResponseSerializer),
            403: OpenApiResponse(response=ErrorResponseSerializer),
            404: OpenApiResponse(response=ErrorResponseSerializer),
        },
    )
    def post(self, request, product_id: int):
        serializer = RestockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        quantity = serializer.validated_data["quantity"]
        self.log.info(
            "Restock requested",
            product_id=product_id,
            quantity=quantity,
            actor_id=getattr(request.user, "id", None),
        )
        dto = self.ledger.restock(product_id, quantity)
        return Response(StockLevelSerializer(dto).data)
