from django.urls import path

from .views import ProductRestockView

urlpatterns = [
    path(
        "<int:product_id>/restock/",
        ProductRestockView.as_view(),
        name="api-products-restock",
    ),
]
