"""API views for merchant stores and products."""

from __future__ import annotations

from django.db.models import Q  # type: ignore
from rest_framework import permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore

from shared.domain.exceptions import NotFound

from . import services
from .filters import ProductFilterSet, StoreFilterSet
from .models import Product, Store
from .serializers import ProductSerializer, ProductWriteSerializer, StoreSerializer, StoreWriteSerializer


def _own_merchant(user):
    if user.is_authenticated and hasattr(user, "is_merchant") and user.is_merchant():
        return user.get_merchant()
    return None


def _is_superadmin(user) -> bool:
    return user.is_authenticated and hasattr(user, "is_platform_superuser") and user.is_platform_superuser()


class StoreViewSet(viewsets.ModelViewSet):
    """Public store directory; merchants manage their own stores."""

    queryset = Store.objects.select_related("merchant").all()
    filterset_class = StoreFilterSet
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if _is_superadmin(user):
            return qs
        merchant = _own_merchant(user)
        if merchant is not None:
            return qs.filter(Q(is_active=True) | Q(merchant=merchant))
        return qs.filter(is_active=True)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return StoreWriteSerializer
        return StoreSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = services.create_store(request.user, serializer.validated_data)
        return Response(StoreSerializer(store).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        store = services.update_store(request.user, kwargs["pk"], serializer.validated_data)
        return Response(StoreSerializer(store).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        services.delete_store(request.user, kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"], permission_classes=[permissions.IsAuthenticated])
    def mine(self, request):  # type: ignore
        merchant = _own_merchant(request.user)
        if merchant is None:
            raise NotFound("Merchant profile not found for current user")
        stores = Store.objects.filter(merchant=merchant).order_by("-created_at")
        return Response(StoreSerializer(stores, many=True).data)


class ProductViewSet(viewsets.ModelViewSet):
    """Marketplace product listing; merchants manage their own inventory."""

    queryset = Product.objects.select_related("merchant", "store").all()
    filterset_class = ProductFilterSet
    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        qs = super().get_queryset()
        user = self.request.user
        if _is_superadmin(user):
            return qs
        merchant = _own_merchant(user)
        if merchant is not None:
            return qs.filter(Q(status=True) | Q(merchant=merchant))
        return qs.filter(status=True)

    def get_serializer_class(self):  # type: ignore
        if self.action in {"create", "update", "partial_update"}:
            return ProductWriteSerializer
        return ProductSerializer

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = services.create_product(request.user, serializer.validated_data)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):  # type: ignore
        partial = kwargs.pop("partial", False)
        serializer = self.get_serializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        product = services.update_product(request.user, kwargs["pk"], serializer.validated_data)
        return Response(ProductSerializer(product).data)

    def destroy(self, request, *args, **kwargs):  # type: ignore
        services.delete_product(request.user, kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"], url_path="toggle-status")
    def toggle_status(self, request, pk=None):  # type: ignore
        product = services.toggle_product_status(request.user, pk)
        return Response(ProductSerializer(product).data)
