"""Integration tests for JWT authentication and user roles."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.users.models import Merchant, User


class TokenAPITests(APITestCase):
    def setUp(self) -> None:
        self.password = "PlayerPass123"
        self.user = User.objects.create_user(
            email="Player@Example.com",
            phone="+966 500-000-001",
            password=self.password,
        )

    def test_obtain_and_refresh_token(self) -> None:
        response = self.client.post(
            reverse("token_obtain_pair"),
            {"email": "Player@example.com", "password": self.password},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("access", response.data)

        refreshed = self.client.post(reverse("token_refresh"), {"refresh": response.data["refresh"]}, format="json")
        self.assertEqual(refreshed.status_code, status.HTTP_200_OK, refreshed.data)

    def test_wrong_password_is_rejected(self) -> None:
        response = self.client.post(
            reverse("token_obtain_pair"),
            {"email": "Player@example.com", "password": "nope"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_access_token_authenticates_requests(self) -> None:
        token = self.client.post(
            reverse("token_obtain_pair"),
            {"email": "Player@example.com", "password": self.password},
            format="json",
        ).data["access"]

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        response = self.client.get(reverse("cart-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)


class RoleTests(APITestCase):
    def test_roles_and_merchant_profile(self) -> None:
        user = User.objects.create_user(email="player@example.com", password="x" * 12)
        seller = User.objects.create_user(
            email="seller@example.com",
            password="x" * 12,
            role=User.RoleChoices.MERCHANT,
        )
        merchant = Merchant.objects.create(user=seller, name="Sports Shop")
        admin = User.objects.create_superuser(email="admin@example.com", password="x" * 12)

        self.assertEqual(user.phone, None)
        self.assertFalse(user.is_merchant())
        self.assertIsNone(user.get_merchant())
        self.assertTrue(seller.is_merchant())
        self.assertEqual(seller.get_merchant(), merchant)
        self.assertTrue(admin.is_platform_superuser())
        self.assertEqual(admin.role, User.RoleChoices.SUPERADMIN)
