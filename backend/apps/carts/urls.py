from django.urls import path, re_path

from .views import (
    CartItemDetailView,
    CartItemListView,
    CartResetView,
    CartView,
    CheckoutView,
)

urlpatterns = [
    path("", CartView.as_view(), name="api-cart"),
    path("reset/", CartResetView.as_view(), name="api-cart-reset"),
    path("items/", CartItemListView.as_view(), name="api-cart-items"),
    # Single pattern that accepts optional trailing slash for item removal
    re_path(
        r"^items/(?P<product_id>\d+)/?$",
        CartItemDetailView.as_view(),
        name="api-cart-item-detail",
    ),
    path("checkout/", CheckoutView.as_view(), name="api-cart-checkout"),
]
