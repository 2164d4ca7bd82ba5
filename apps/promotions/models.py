"""
Voucher models for the storefront checkout platform.

Supports:
- Voucher definitions (fixed amount, percentage with cap, free shipping)
- Public vouchers applied by code and private vouchers bought with points
- Per-user redeemed instances carrying a snapshot of the definition
- Category and user targeting, minimum order, global usage limits
- Per-order usage history
"""

from __future__ import annotations

import logging
import secrets
import string
import uuid
from typing import Any, ClassVar

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger(__name__)

# ===============================================================================
# Constants
# ===============================================================================

INSTANCE_SUFFIX_LENGTH = 6
INSTANCE_SUFFIX_CHARS = string.ascii_uppercase + string.digits
INSTANCE_SEPARATOR = "_"

MAX_PERCENT = 100

VOUCHER_TYPES: tuple[tuple[str, Any], ...] = (
    ("fixed", _("Fixed Amount")),
    ("percent", _("Percentage")),
    ("freeship", _("Free Shipping")),
)


def normalize_code(code: str | None) -> str:
    """Trim and upper-case a voucher code."""
    return (code or "").strip().upper()


def is_instance_code(code: str) -> bool:
    """Redeemed instance codes carry a ``_SUFFIX`` after the original code."""
    return INSTANCE_SEPARATOR in code


# ===============================================================================
# Voucher Definition
# ===============================================================================


class VoucherDefinitionQuerySet(models.QuerySet["VoucherDefinition"]):
    def active(self) -> VoucherDefinitionQuerySet:
        return self.filter(is_active=True)

    def within_window(self, now: Any = None) -> VoucherDefinitionQuerySet:
        now = now or timezone.now()
        return self.filter(
            models.Q(valid_from__isnull=True) | models.Q(valid_from__lte=now),
            models.Q(valid_until__isnull=True) | models.Q(valid_until__gte=now),
        )

    def public(self) -> VoucherDefinitionQuerySet:
        return self.active().filter(is_public=True)

    def redeemable(self) -> VoucherDefinitionQuerySet:
        return self.active().filter(is_public=False, points_cost__gt=0)


class VoucherDefinition(models.Model):
    """
    Voucher code offering an order discount.

    Public vouchers are applied directly by code; private ones are only
    obtained by spending ``points_cost`` reward points, which mints a
    RedeemedVoucherInstance for the user.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(
        max_length=50,
        unique=True,
        help_text=_("Unique voucher code, stored upper-case"),
    )
    description = models.TextField(blank=True, help_text=_("Description shown to customers"))
    icon = models.CharField(max_length=16, blank=True)

    # Discount type and value
    type = models.CharField(max_length=20, choices=VOUCHER_TYPES, default="fixed")
    value = models.PositiveIntegerField(
        help_text=_("Amount off (fixed/freeship) or percentage (percent)"),
    )
    max_discount = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Cap on the discount amount (percent vouchers only)"),
    )

    # Eligibility
    min_order = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Minimum order subtotal to qualify"),
    )
    target_category = models.CharField(
        max_length=100,
        blank=True,
        help_text=_("Only valid when every cart item belongs to this category"),
    )
    target_user = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="targeted_vouchers",
        help_text=_("Restrict this voucher to a single customer"),
    )

    # Validity period
    valid_from = models.DateTimeField(null=True, blank=True, help_text=_("When voucher becomes valid"))
    valid_until = models.DateTimeField(null=True, blank=True, help_text=_("When voucher expires (null = never)"))

    # Usage limits
    usage_limit = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text=_("Maximum total uses across all customers (null = unlimited)"),
    )
    used_count = models.PositiveIntegerField(default=0, help_text=_("Current total use count"))

    # Visibility
    is_public = models.BooleanField(default=True, help_text=_("Shown on the storefront and applicable by code"))
    points_cost = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text=_("Reward points needed to redeem a private voucher"),
    )
    is_active = models.BooleanField(default=True, help_text=_("Master switch"))

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = VoucherDefinitionQuerySet.as_manager()

    class Meta:
        db_table = "promotion_vouchers"
        verbose_name = _("Voucher")
        verbose_name_plural = _("Vouchers")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["is_active", "is_public"], name="idx_voucher_visibility"),
            models.Index(fields=["valid_from", "valid_until"], name="idx_voucher_validity"),
        )

    def __str__(self) -> str:
        return f"{self.code} ({self.type} {self.value})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Normalize code to uppercase before saving."""
        if self.code:
            self.code = normalize_code(self.code)
        if self.target_category:
            self.target_category = self.target_category.strip()
        super().save(*args, **kwargs)

    def clean(self) -> None:
        """Validate voucher configuration."""
        super().clean()
        self.code = normalize_code(self.code)
        self._validate_code()
        self._validate_discount_values()
        self._validate_visibility()
        self._validate_dates()

    def _validate_code(self) -> None:
        if INSTANCE_SEPARATOR in self.code:
            raise ValidationError({"code": _("Voucher codes cannot contain '_'")})

    def _validate_discount_values(self) -> None:
        """Validate discount type and value consistency."""
        if self.max_discount is not None and self.type != "percent":
            raise ValidationError({"max_discount": _("Only percentage vouchers can have a maximum discount")})
        if self.type == "percent" and self.value is not None and self.value > MAX_PERCENT:
            raise ValidationError({"value": _("Percentage must be between 0 and 100")})

    def _validate_visibility(self) -> None:
        if not self.is_public and not self.points_cost:
            raise ValidationError({"points_cost": _("Private vouchers need a points cost")})

    def _validate_dates(self) -> None:
        """Validate date range."""
        if self.valid_until and self.valid_from and self.valid_until < self.valid_from:
            raise ValidationError({"valid_until": _("valid_until must be after valid_from")})

    def is_within_window(self, now: Any = None) -> bool:
        now = now or timezone.now()
        if self.valid_from and now < self.valid_from:
            return False
        return not (self.valid_until and now > self.valid_until)

    @property
    def is_depleted(self) -> bool:
        return self.usage_limit is not None and self.used_count >= self.usage_limit

    @property
    def remaining_uses(self) -> int | None:
        """Get remaining uses, or None if unlimited."""
        if self.usage_limit is None:
            return None
        return max(0, self.usage_limit - self.used_count)


# ===============================================================================
# Redeemed Voucher Instance
# ===============================================================================


class RedeemedVoucherInstance(models.Model):
    """
    A user's own copy of a voucher, minted by spending points.

    Discount terms are copied from the definition at redemption time so the
    instance stays usable when the definition is edited or deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="voucher_instances",
    )
    voucher_code = models.CharField(max_length=80, unique=True, help_text=_("CODE_SUFFIX, unique per instance"))
    original_code = models.CharField(max_length=50, db_index=True)
    definition = models.ForeignKey(
        VoucherDefinition,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="instances",
    )

    # Snapshot of the definition terms
    type = models.CharField(max_length=20, choices=VOUCHER_TYPES)
    value = models.PositiveIntegerField()
    max_discount = models.PositiveIntegerField(null=True, blank=True)
    min_order = models.PositiveIntegerField(null=True, blank=True)
    target_category = models.CharField(max_length=100, blank=True)
    valid_until = models.DateTimeField(null=True, blank=True)
    description = models.TextField(blank=True)
    icon = models.CharField(max_length=16, blank=True)

    # Redemption and consumption
    points_spent = models.PositiveIntegerField(default=0)
    is_used = models.BooleanField(default=False)
    used_at = models.DateTimeField(null=True, blank=True)
    redeemed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "promotion_redeemed_vouchers"
        verbose_name = _("Redeemed Voucher")
        verbose_name_plural = _("Redeemed Vouchers")
        ordering: ClassVar[tuple[str, ...]] = ("-redeemed_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["user", "is_used"], name="idx_redeemed_user_used"),
            models.Index(fields=["valid_until"], name="idx_redeemed_valid_until"),
        )

    def __str__(self) -> str:
        return f"{self.voucher_code} ({'used' if self.is_used else 'available'})"

    def is_within_window(self, now: Any = None) -> bool:
        now = now or timezone.now()
        return not (self.valid_until and now > self.valid_until)

    @staticmethod
    def generate_suffix() -> str:
        return "".join(secrets.choice(INSTANCE_SUFFIX_CHARS) for _i in range(INSTANCE_SUFFIX_LENGTH))

    @classmethod
    def generate_code(cls, original_code: str, max_attempts: int = 100) -> str:
        """Generate an unused ``{CODE}_{SUFFIX}`` instance code."""
        for _attempt in range(max_attempts):
            candidate = f"{normalize_code(original_code)}{INSTANCE_SEPARATOR}{cls.generate_suffix()}"
            if not cls.objects.filter(voucher_code=candidate).exists():
                return candidate
        raise ValueError(f"Unable to generate unique voucher code after {max_attempts} attempts")


# ===============================================================================
# Voucher Usage
# ===============================================================================


class VoucherUsage(models.Model):
    """
    Records a voucher applied to an order.
    """

    SOURCE_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        ("definition", "Voucher"),
        ("instance", "Redeemed Voucher"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="voucher_usages",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="voucher_usages",
    )
    voucher_code = models.CharField(max_length=80, db_index=True)
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES)
    discount_amount = models.PositiveIntegerField(default=0)

    is_reversed = models.BooleanField(default=False)
    reversed_at = models.DateTimeField(null=True, blank=True)
    used_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "promotion_voucher_usages"
        verbose_name = _("Voucher Usage")
        verbose_name_plural = _("Voucher Usages")
        ordering: ClassVar[tuple[str, ...]] = ("-used_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["user", "-used_at"], name="idx_voucher_usage_user"),
        )

    def __str__(self) -> str:
        return f"{self.voucher_code} on {self.order_id}"
