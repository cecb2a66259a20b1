"""URL configuration for FieldHub.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
JWT token endpoints, the OpenAPI schema and each app's DRF router.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView  # type: ignore

from apps.catalog.urls import product_urlpatterns, store_urlpatterns
from apps.orders.urls import cart_urlpatterns, order_urlpatterns

urlpatterns = [
    path('admin/', admin.site.urls),
    # Authentication
    path('api/v1/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/v1/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    # Application URLs
    path('api/v1/fields/', include('apps.fields.urls')),
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/subscriptions/', include('apps.subscriptions.urls')),
    path('api/v1/stores/', include(store_urlpatterns)),
    path('api/v1/products/', include(product_urlpatterns)),
    path('api/v1/cart/', include(cart_urlpatterns)),
    path('api/v1/orders/', include(order_urlpatterns)),
    # OpenAPI
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
