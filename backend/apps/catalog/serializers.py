from rest_framework import serializers

from apps.catalog.models import MAX_QUANTITY


class RestockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)


class StockLevelSerializer(serializers.Serializer):
    # Matches ProductDTO shapes used for restock responses
    productId = serializers.IntegerField(source="id")
    name = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    stock = serializers.IntegerField()
