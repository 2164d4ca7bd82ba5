"""
Loyalty models for the storefront checkout platform.

- LoyaltyTier: threshold ladder resolved from a user's lifetime points
- LoyaltyTransaction: append-only ledger of every reward balance change
"""

from __future__ import annotations

import uuid
from typing import Any, ClassVar

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class LoyaltyTier(models.Model):
    """
    Loyalty tier level with its checkout benefits.

    ``free_shipping_threshold``: null keeps the store-wide threshold,
    0 ships every order free, N ships free from N upwards.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Tier identity
    slug = models.SlugField(max_length=50, unique=True)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    # Qualification
    min_points = models.PositiveIntegerField(
        unique=True,
        help_text=_("Minimum lifetime points to reach this tier"),
    )

    # Benefits
    discount_percent = models.PositiveSmallIntegerField(
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        help_text=_("Automatic discount on the order subtotal (0-100)"),
    )
    free_shipping_threshold = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Overrides the store free-shipping threshold (empty = no override, 0 = always free)"),
    )
    benefits = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Ordered list of benefit descriptions shown to customers"),
    )

    # Display
    icon = models.CharField(max_length=16, blank=True)
    badge_color = models.CharField(max_length=20, default="gray")
    sort_order = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "loyalty_tiers"
        verbose_name = _("Loyalty Tier")
        verbose_name_plural = _("Loyalty Tiers")
        ordering: ClassVar[tuple[str, ...]] = ("min_points",)

    def __str__(self) -> str:
        return f"{self.icon} {self.name} ({self.min_points}+)".strip()

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Normalize slug to lowercase before saving."""
        if self.slug:
            self.slug = self.slug.lower().strip()
        super().save(*args, **kwargs)

    def clean(self) -> None:
        super().clean()
        if not isinstance(self.benefits, list) or not all(isinstance(b, str) for b in self.benefits):
            raise ValidationError({"benefits": _("Benefits must be a list of strings")})


class LoyaltyTransaction(models.Model):
    """
    Tracks all reward point movements.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="loyalty_transactions",
    )

    TRANSACTION_TYPES: ClassVar[tuple[tuple[str, str], ...]] = (
        ("earn", "Points Earned"),
        ("redeem", "Points Redeemed"),
        ("reverse", "Order Cancelled"),
    )
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)

    # Points (positive = credit, negative = debit)
    points = models.IntegerField(help_text=_("Spendable balance change"))
    lifetime_points = models.IntegerField(default=0, help_text=_("Lifetime total change"))
    balance_after = models.PositiveIntegerField(help_text=_("Spendable balance after transaction"))

    # Related objects
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="loyalty_transactions",
    )
    voucher_code = models.CharField(max_length=80, blank=True)

    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "loyalty_transactions"
        verbose_name = _("Loyalty Transaction")
        verbose_name_plural = _("Loyalty Transactions")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["user", "-created_at"], name="idx_loyalty_tx_user"),
            models.Index(fields=["transaction_type", "-created_at"], name="idx_loyalty_tx_type"),
        )

    def __str__(self) -> str:
        return f"{self.transaction_type}: {self.points:+d} points"
