"""URL routing for the cart and orders."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import CartViewSet, OrderViewSet

cart_router = DefaultRouter()
cart_router.register(r"", CartViewSet, basename="cart")

order_router = DefaultRouter()
order_router.register(r"", OrderViewSet, basename="order")

cart_urlpatterns = [
    path("", include(cart_router.urls)),
]

order_urlpatterns = [
    path("", include(order_router.urls)),
]
