from django.urls import path, include
from apps.carts.views import ProductQuoteView

urlpatterns = [
    path(
        "products/<int:product_id>/quote/",
        ProductQuoteView.as_view(),
        name="api-products-quote",
    ),
    path("cart/", include("apps.carts.urls")),
    path("", include("apps.catalog.urls")),
]
