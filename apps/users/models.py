"""User domain models for FieldHub.

The platform distinguishes three roles: regular users who book fields,
subscribe and shop; merchants who own fields, stores and products; and
platform superadmins. Merchant-specific attributes live on a separate
``Merchant`` profile so that fields and products keep a weak reference
to the business rather than to the login account.
"""

from __future__ import annotations

from typing import Any

from django.conf import settings  # type: ignore
from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.core.validators import RegexValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


PHONE_VALIDATOR = RegexValidator(
    regex=r"^\+?\d{7,15}$",
    message=_("Invalid phone number. Use the international format without spaces."),
)


class CustomUserManager(BaseUserManager):
    """User manager that uses email as the login."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("Email is required to create a user.")
        email = self.normalize_email(email)

        phone = extra_fields.get("phone")
        if phone:
            extra_fields["phone"] = self.normalize_phone(phone)

        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        extra_fields.setdefault("role", CustomUser.RoleChoices.USER)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", CustomUser.RoleChoices.SUPERADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)

    @staticmethod
    def normalize_phone(phone: str) -> str:
        return phone.replace(" ", "").replace("-", "")


class CustomUser(AbstractUser):
    """Platform account with a role."""

    class RoleChoices(models.TextChoices):
        USER = "user", _("User")
        MERCHANT = "merchant", _("Merchant")
        SUPERADMIN = "superadmin", _("Superadmin")

    username = models.CharField(
        _("Display name"),
        max_length=150,
        blank=True,
        help_text=_("Optional, shown in interfaces and receipts."),
    )
    email = models.EmailField(_("Email"), unique=True)
    phone = models.CharField(
        _("Phone"),
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        validators=[PHONE_VALIDATOR],
    )
    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.USER,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    def is_merchant(self) -> bool:
        return self.role == self.RoleChoices.MERCHANT

    def is_platform_superuser(self) -> bool:
        return self.role == self.RoleChoices.SUPERADMIN or self.is_superuser

    def get_merchant(self) -> "Merchant | None":
        """The merchant profile of this account, if it has one."""
        try:
            return self.merchant_profile
        except Merchant.DoesNotExist:
            return None


class Merchant(models.Model):
    """Business profile of a merchant account."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="merchant_profile",
    )
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True, validators=[PHONE_VALIDATOR])
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Merchant")
        verbose_name_plural = _("Merchants")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


User = CustomUser
