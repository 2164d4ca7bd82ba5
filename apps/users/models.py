"""
User models for the storefront checkout platform
Email-based authentication with loyalty reward balances.
"""

from __future__ import annotations

from typing import Any, ClassVar

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication"""

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any) -> User:
        """Create and return a regular user with email and password"""
        if not email:
            raise ValueError("The Email field must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any) -> User:
        """Create and return a superuser with email and password"""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Storefront customer or staff member.

    ``points`` is the spendable balance (lowered only by voucher redemption);
    ``total_points`` is the lifetime accumulation used to resolve the loyalty tier.
    Both move together when an order is placed or cancelled. Balances are only
    changed through RewardLedger conditional updates, never read-modify-write.
    """

    # Basic information
    username = None  # Remove username field, using email instead
    email = models.EmailField(_("email address"), unique=True)
    phone = models.CharField(max_length=20, blank=True, help_text=_("Contact phone number"))
    address = models.CharField(max_length=255, blank=True, help_text=_("Default delivery address"))

    # Loyalty balances
    points = models.PositiveIntegerField(default=0, help_text=_("Spendable reward points"))
    total_points = models.PositiveIntegerField(
        default=0, help_text=_("Lifetime reward points, used to resolve the loyalty tier")
    )

    # Audit fields
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Custom manager
    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = []

    class Meta:
        db_table = "users"
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["is_staff"], name="idx_user_staff"),
            models.Index(fields=["total_points"], name="idx_user_total_points"),
        )

    def __str__(self) -> str:
        return f"{self.get_full_name()} ({self.email})"

    def get_full_name(self) -> str:
        """Get user's full name or email if name not available"""
        full_name = super().get_full_name()
        return full_name if full_name.strip() else self.email
