"""
Order models for the storefront checkout platform.
Orders with price snapshots, loyalty tier snapshot and status tracking history.
"""

from __future__ import annotations

import uuid
from typing import Any, ClassVar

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

# ===============================================================================
# ORDER MANAGEMENT MODELS
# ===============================================================================


class Order(models.Model):
    """
    Customer order.

    Amounts are integers in the store currency. ``earned_points`` is fixed at
    creation and is exactly what cancellation takes back; the tier fields keep
    the tier that priced the order even if the ladder changes later.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Order identification
    order_number = models.CharField(max_length=50, unique=True, help_text=_("Human-readable order number"))

    user = models.ForeignKey("users.User", on_delete=models.PROTECT, related_name="orders")

    # Order status workflow
    STATUS_CHOICES: ClassVar[tuple[tuple[str, Any], ...]] = (
        ("pending", _("Pending")),  # Placed, awaiting confirmation
        ("confirmed", _("Confirmed")),
        ("processing", _("Processing")),  # Preparing items
        ("shipping", _("Shipping")),  # Out for delivery
        ("delivered", _("Delivered")),  # Terminal success
        ("cancelled", _("Cancelled")),
        ("refunded", _("Refunded")),  # Manual follow-up of a cancellation
    )
    # Legacy display names accepted on input
    STATUS_ALIASES: ClassVar[dict[str, str]] = {"completed": "delivered"}

    CUSTOMER_CANCELLABLE_STATUSES: ClassVar[tuple[str, ...]] = ("pending", "confirmed")
    CLOSED_STATUSES: ClassVar[tuple[str, ...]] = ("cancelled", "refunded")

    # Forward moves may skip steps; cancellation from any non-terminal state
    VALID_TRANSITIONS: ClassVar[dict[str, tuple[str, ...]]] = {
        "pending": ("confirmed", "processing", "shipping", "delivered", "cancelled"),
        "confirmed": ("processing", "shipping", "delivered", "cancelled"),
        "processing": ("shipping", "delivered", "cancelled"),
        "shipping": ("delivered", "cancelled"),
        "delivered": (),
        "cancelled": ("refunded",),
        "refunded": (),
    }

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")

    # Pricing snapshot
    subtotal = models.PositiveBigIntegerField(default=0)
    shipping_fee = models.PositiveBigIntegerField(default=0)
    tier_discount_amount = models.PositiveBigIntegerField(default=0)
    voucher_discount_amount = models.PositiveBigIntegerField(default=0)
    total = models.PositiveBigIntegerField(default=0)
    earned_points = models.PositiveIntegerField(default=0, help_text=_("Points granted at placement"))

    # Voucher reference
    VOUCHER_SOURCE_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        ("", "None"),
        ("definition", "Voucher"),
        ("instance", "Redeemed Voucher"),
    )
    voucher_code = models.CharField(max_length=80, blank=True, db_index=True)
    voucher_source = models.CharField(max_length=20, choices=VOUCHER_SOURCE_CHOICES, blank=True, default="")

    # Loyalty tier snapshot
    tier_slug = models.CharField(max_length=50, blank=True)
    tier_name = models.CharField(max_length=100, blank=True)
    tier_discount_percent = models.PositiveSmallIntegerField(default=0)

    # Customer contact snapshot
    full_name = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    note = models.TextField(blank=True)

    # Payment
    PAYMENT_METHOD_CHOICES: ClassVar[tuple[tuple[str, Any], ...]] = (
        ("cod", _("Cash on Delivery")),
        ("bank_transfer", _("Bank Transfer")),
        ("card", _("Card")),
    )
    PAYMENT_STATUS_CHOICES: ClassVar[tuple[tuple[str, Any], ...]] = (
        ("unpaid", _("Unpaid")),
        ("paid", _("Paid")),
        ("refunded", _("Refunded")),
    )
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default="cod")
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES, default="unpaid")

    # Cancellation
    cancelled_at = models.DateTimeField(null=True, blank=True)
    rewards_reversed = models.BooleanField(
        default=False, help_text=_("Set once when points and voucher were given back")
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "orders"
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["user", "-created_at"], name="idx_order_user_created"),
            models.Index(fields=["status", "-created_at"], name="idx_order_status_created"),
        )

    def __str__(self) -> str:
        return f"Order {self.order_number} ({self.status})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Auto-generate order number before saving"""
        if not self.order_number:
            self.generate_order_number()
        super().save(*args, **kwargs)

    def generate_order_number(self) -> None:
        """Generate a unique order number based on date and sequence"""
        # Format: ORD-YYYYMMDD-XXXXXX
        now = timezone.localtime()
        date_part = now.strftime("%Y%m%d")
        sequence = Order.objects.filter(order_number__startswith=f"ORD-{date_part}-").count() + 1
        candidate = f"ORD-{date_part}-{sequence:06d}"
        while Order.objects.filter(order_number=candidate).exists():
            sequence += 1
            candidate = f"ORD-{date_part}-{sequence:06d}"
        self.order_number = candidate

    @classmethod
    def normalize_status(cls, value: str | None) -> str | None:
        """Canonical status key for user input (``Completed`` → ``delivered``), None if unknown."""
        key = (value or "").strip().lower()
        key = cls.STATUS_ALIASES.get(key, key)
        return key if key in dict(cls.STATUS_CHOICES) else None

    @classmethod
    def is_allowed_transition(cls, old_status: str, new_status: str) -> bool:
        return new_status in cls.VALID_TRANSITIONS.get(old_status, ())

    @property
    def can_be_cancelled(self) -> bool:
        """Check if the customer may cancel this order"""
        return self.status in self.CUSTOMER_CANCELLABLE_STATUSES

    @property
    def total_discount(self) -> int:
        return self.tier_discount_amount + self.voucher_discount_amount


class OrderItem(models.Model):
    """
    Line item with the price at time of purchase.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")

    # Product snapshot
    product_id = models.CharField(max_length=64, help_text=_("Catalog product identifier"))
    product_name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True)

    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.PositiveBigIntegerField(help_text=_("Unit price at time of purchase"))
    line_total = models.PositiveBigIntegerField(default=0)

    class Meta:
        db_table = "order_items"
        verbose_name = _("Order Item")
        verbose_name_plural = _("Order Items")

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.order.order_number})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.line_total = self.quantity * self.unit_price
        super().save(*args, **kwargs)


class OrderStatusHistory(models.Model):
    """
    Track order status changes for the customer tracking timeline and audit trail.
    """

    DEFAULT_NOTES: ClassVar[dict[str, str]] = {
        "pending": "Order created",
        "confirmed": "Order confirmed",
        "processing": "Preparing items",
        "shipping": "Out for delivery",
        "delivered": "Delivered successfully",
        "cancelled": "Order cancelled",
        "refunded": "Refunded",
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")

    # Status change details
    old_status = models.CharField(max_length=20, blank=True, help_text=_("Previous status"))
    new_status = models.CharField(max_length=20, help_text=_("New status"))
    note = models.CharField(max_length=255, blank=True)

    # Change context
    changed_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text=_("User who made the change"),
    )
    is_automatic = models.BooleanField(default=False, help_text=_("Whether this was an automatic system change"))

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_status_history"
        verbose_name = _("Order Status History")
        verbose_name_plural = _("Order Status Histories")
        ordering: ClassVar[tuple[str, ...]] = ("created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["order", "created_at"], name="idx_status_history_order"),
        )

    def __str__(self) -> str:
        return f"{self.order.order_number}: {self.old_status} → {self.new_status}"

    @classmethod
    def default_note(cls, status: str) -> str:
        return cls.DEFAULT_NOTES.get(status, f"Status: {status}")
