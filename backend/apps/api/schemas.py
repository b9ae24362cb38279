from rest_framework import serializers


class ErrorDetailSerializer(serializers.Serializer):
    code = serializers.CharField()
    message = serializers.CharField()
    status = serializers.IntegerField()
    details = serializers.JSONField(required=False)
    hint = serializers.CharField(required=False, allow_blank=True)


class ErrorResponseSerializer(serializers.Serializer):
    error = ErrorDetailSerializer()


class ShortfallSerializer(serializers.Serializer):
    productId = serializers.IntegerField(source="product_id")
    requested = serializers.IntegerField()
    available = serializers.IntegerField()
    shortBy = serializers.IntegerField(source="short_by")


class InsufficientStockDetailSerializer(ErrorDetailSerializer):
    details = ShortfallSerializer(many=True)


class InsufficientStockResponseSerializer(serializers.Serializer):
    """Documents the 409 payload returned when a checkout cannot be covered by stock."""

    error = InsufficientStockDetailSerializer()
