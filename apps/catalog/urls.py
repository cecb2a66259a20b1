"""URL routing for stores and products."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import ProductViewSet, StoreViewSet

store_router = DefaultRouter()
store_router.register(r"", StoreViewSet, basename="store")

product_router = DefaultRouter()
product_router.register(r"", ProductViewSet, basename="product")

store_urlpatterns = [
    path("", include(store_router.urls)),
]

product_urlpatterns = [
    path("", include(product_router.urls)),
]
