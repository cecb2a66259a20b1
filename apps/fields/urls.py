"""URL routing for the fields domain."""

from __future__ import annotations

from django.urls import include, path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import FieldViewSet

router = DefaultRouter()
router.register(r"", FieldViewSet, basename="field")

urlpatterns = [
    path("", include(router.urls)),
]
