from rest_framework import serializers

from apps.catalog.models import MAX_PRODUCT_ID, MAX_QUANTITY


class LineItemReadSerializer(serializers.Serializer):
    productId = serializers.IntegerField(source="product_id")
    name = serializers.CharField()
    quantity = serializers.IntegerField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartReadSerializer(serializers.Serializer):
    items = LineItemReadSerializer(many=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)


class CartResetSerializer(serializers.Serializer):
    itemsRemoved = serializers.IntegerField()


class CartItemWriteSerializer(serializers.Serializer):
    # productId is canonical; product_id is accepted for snake_case clients
    productId = serializers.IntegerField(
        required=False, min_value=1, max_value=MAX_PRODUCT_ID
    )
    product_id = serializers.IntegerField(
        required=False, write_only=True, min_value=1, max_value=MAX_PRODUCT_ID
    )
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)

    def validate(self, attrs):
        product_id = attrs.pop("productId", None)
        snake = attrs.pop("product_id", None)
        if product_id is None:
            product_id = snake
        if product_id is None:
            raise serializers.ValidationError({"productId": ["This field is required."]})
        attrs["product_id"] = product_id
        return attrs


class CheckoutReceiptSerializer(serializers.Serializer):
    items = LineItemReadSerializer(many=True)
    totalCharged = serializers.DecimalField(
        source="total_charged", max_digits=12, decimal_places=2
    )
