"""
Voucher services for the storefront checkout platform.
Business logic for voucher validation, points redemption and instance inventory.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar

from django.db.models import F, Q, QuerySet
from django.utils import timezone

from apps.common.security_decorators import atomic_with_retry
from apps.common.types import (
    AlreadyUsed,
    Amount,
    BusinessError,
    CategoryMismatch,
    Expired,
    InvalidTransition,
    MinOrderNotMet,
    NotFound,
    NotYours,
    UsageExhausted,
    VoucherCode,
)
from apps.common.validators import log_security_event
from apps.loyalty.services import RewardLedger

from .models import (
    RedeemedVoucherInstance,
    VoucherDefinition,
    is_instance_code,
    normalize_code,
)

if TYPE_CHECKING:
    from apps.orders.pricing import CartLine
    from apps.users.models import User

logger = logging.getLogger(__name__)


# ===============================================================================
# Voucher Terms
# ===============================================================================


@dataclass(frozen=True)
class VoucherTerms:
    """
    Immutable discount terms of an accepted voucher.

    ``source`` is ``definition`` for public codes and ``instance`` for a
    user's redeemed voucher; ``record_id`` points at the matching row.
    """

    code: VoucherCode
    source: str
    record_id: uuid.UUID
    value: Amount

    kind: ClassVar[str] = ""

    @staticmethod
    def from_record(record: VoucherDefinition | RedeemedVoucherInstance) -> VoucherTerms:
        """Convert a voucher row into its typed terms."""
        if isinstance(record, RedeemedVoucherInstance):
            code, source = record.voucher_code, "instance"
        else:
            code, source = record.code, "definition"

        if record.type == "percent":
            return PercentVoucher(
                code=code, source=source, record_id=record.pk, value=record.value, max_discount=record.max_discount
            )
        if record.type == "freeship":
            return FreeshipVoucher(code=code, source=source, record_id=record.pk, value=record.value)
        return FixedVoucher(code=code, source=source, record_id=record.pk, value=record.value)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "type": self.kind, "value": self.value, "source": self.source}


@dataclass(frozen=True)
class FixedVoucher(VoucherTerms):
    """Flat amount off the payable total"""

    kind: ClassVar[str] = "fixed"


@dataclass(frozen=True)
class PercentVoucher(VoucherTerms):
    """Percentage of the subtotal, optionally capped"""

    max_discount: Amount | None = None

    kind: ClassVar[str] = "percent"

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "max_discount": self.max_discount}


@dataclass(frozen=True)
class FreeshipVoucher(VoucherTerms):
    """Shipping fee waiver up to ``value``"""

    kind: ClassVar[str] = "freeship"


# ===============================================================================
# Data Classes for Results
# ===============================================================================


@dataclass
class ValidationResult:
    """
    Result of voucher validation.

    Attributes:
        is_valid: Whether the voucher can be applied.
        voucher: Accepted voucher terms when valid.
        error_message: Human-readable error message if validation failed.
        error_code: Machine-readable error code (see apps.common.types).
        error: The business error behind a failed validation.
    """

    is_valid: bool
    voucher: VoucherTerms | None = None
    error_message: str = ""
    error_code: str = ""
    error: BusinessError | None = None

    @classmethod
    def failure(cls, error: BusinessError) -> ValidationResult:
        return cls(is_valid=False, error_message=error.message, error_code=error.code, error=error)


# ===============================================================================
# Voucher Validator
# ===============================================================================


class VoucherValidator:
    """
    Checks a voucher code against eligibility rules for a user and cart.

    Codes with a ``_SUFFIX`` resolve only to the caller's unused redeemed
    instances; plain codes resolve only to public, active definitions.
    """

    @classmethod
    def validate(
        cls,
        code: str | None,
        user: User | None,
        cart_items: Iterable[CartLine],
        subtotal: Amount,
        now: datetime | None = None,
    ) -> ValidationResult:
        normalized = normalize_code(code)
        if not normalized:
            return ValidationResult.failure(NotFound("Please enter a voucher code"))

        try:
            terms = cls._check(normalized, user, list(cart_items), subtotal, now or timezone.now())
        except BusinessError as e:
            logger.info(
                "🎟️ [Voucher] Rejected %s: %s",
                normalized,
                e.code,
                extra={"voucher_code": normalized, "error_code": e.code, "user_id": getattr(user, "pk", None)},
            )
            return ValidationResult.failure(e)

        return ValidationResult(is_valid=True, voucher=terms)

    @classmethod
    def _check(
        cls, code: str, user: User | None, cart_items: list[CartLine], subtotal: Amount, now: datetime
    ) -> VoucherTerms:
        record: VoucherDefinition | RedeemedVoucherInstance
        if is_instance_code(code):
            record = cls._resolve_instance(code, user)
        else:
            record = cls._resolve_definition(code)

        if not record.is_within_window(now):
            raise Expired()

        if isinstance(record, VoucherDefinition) and record.is_depleted:
            raise UsageExhausted()

        if record.min_order and subtotal < record.min_order:
            raise MinOrderNotMet(f"Order subtotal must be at least {record.min_order:,}", min_order=record.min_order)

        if record.target_category and any(line.category != record.target_category for line in cart_items):
            raise CategoryMismatch(
                f'This voucher only applies when every item is from "{record.target_category}"',
                target_category=record.target_category,
            )

        if (
            isinstance(record, VoucherDefinition)
            and record.target_user_id is not None
            and record.target_user_id != getattr(user, "pk", None)
        ):
            raise NotYours()

        return VoucherTerms.from_record(record)

    @staticmethod
    def _resolve_instance(code: str, user: User | None) -> RedeemedVoucherInstance:
        if user is None:
            raise NotFound("Voucher code not found")
        instance = RedeemedVoucherInstance.objects.filter(voucher_code=code, user=user, is_used=False).first()
        if instance is None:
            raise NotFound("Voucher code not found")
        return instance

    @staticmethod
    def _resolve_definition(code: str) -> VoucherDefinition:
        definition = VoucherDefinition.objects.public().filter(code=code).first()
        if definition is None:
            raise NotFound("Voucher code not found")
        return definition

    # Listings

    @staticmethod
    def public_vouchers(now: datetime | None = None) -> QuerySet[VoucherDefinition]:
        """Active public vouchers within their validity window"""
        return VoucherDefinition.objects.public().within_window(now).order_by("-created_at")

    @staticmethod
    def redeemable_vouchers(now: datetime | None = None) -> QuerySet[VoucherDefinition]:
        """Active private vouchers that can be bought with points"""
        return VoucherDefinition.objects.redeemable().within_window(now).order_by("points_cost")

    @staticmethod
    def available_for_user(user: User, now: datetime | None = None) -> QuerySet[RedeemedVoucherInstance]:
        """The user's unused, unexpired redeemed vouchers"""
        now = now or timezone.now()
        return RedeemedVoucherInstance.objects.filter(user=user, is_used=False).filter(
            Q(valid_until__isnull=True) | Q(valid_until__gte=now)
        )


# ===============================================================================
# Voucher Inventory
# ===============================================================================


class VoucherInventory:
    """
    Per-user voucher instances and global usage counters.

    Every state change is a conditional UPDATE; primitives raise business
    errors and expect the caller to own the transaction.
    """

    @classmethod
    @atomic_with_retry()
    def redeem(cls, user: User, code: str, now: datetime | None = None) -> RedeemedVoucherInstance:
        """
        Spend points on a private voucher and mint an instance for the user.

        Raises:
            NotFound: unknown, inactive, public or zero-cost voucher
            Expired: outside its validity window
            InsufficientPoints: balance below points_cost (nothing changes)
        """
        now = now or timezone.now()
        normalized = normalize_code(code)
        definition = VoucherDefinition.objects.redeemable().filter(code=normalized).first()
        if definition is None:
            raise NotFound("Voucher not available for redemption")
        if not definition.is_within_window(now):
            raise Expired()

        instance_code = RedeemedVoucherInstance.generate_code(definition.code)
        RewardLedger.debit_for_redemption(user, definition.points_cost, voucher_code=instance_code)

        instance = RedeemedVoucherInstance.objects.create(
            user=user,
            voucher_code=instance_code,
            original_code=definition.code,
            definition=definition,
            type=definition.type,
            value=definition.value,
            max_discount=definition.max_discount,
            min_order=definition.min_order,
            target_category=definition.target_category,
            valid_until=definition.valid_until,
            description=definition.description,
            icon=definition.icon,
            points_spent=definition.points_cost,
            redeemed_at=now,
        )

        log_security_event(
            "voucher_redeemed",
            {"user_id": str(user.pk), "voucher_code": instance_code, "points_spent": definition.points_cost},
        )
        logger.info("🎟️ [Voucher] User %s redeemed %s", user.pk, instance_code)
        return instance

    @staticmethod
    def consume(instance_id: uuid.UUID) -> None:
        """Mark an instance used. Raises AlreadyUsed / NotFound."""
        updated = RedeemedVoucherInstance.objects.filter(pk=instance_id, is_used=False).update(
            is_used=True, used_at=timezone.now()
        )
        if updated:
            logger.info("✅ [Voucher] Instance %s consumed", instance_id)
            return
        if RedeemedVoucherInstance.objects.filter(pk=instance_id).exists():
            raise AlreadyUsed(instance_id=instance_id)
        raise NotFound("Voucher not found", instance_id=instance_id)

    @staticmethod
    def restore(instance_id: uuid.UUID) -> None:
        """Undo consume. Raises InvalidTransition when the instance is not used, NotFound when missing."""
        updated = RedeemedVoucherInstance.objects.filter(pk=instance_id, is_used=True).update(
            is_used=False, used_at=None
        )
        if updated:
            logger.info("↩️ [Voucher] Instance %s restored", instance_id)
            return
        if RedeemedVoucherInstance.objects.filter(pk=instance_id).exists():
            raise InvalidTransition("Voucher is not marked as used", instance_id=instance_id)
        raise NotFound("Voucher not found", instance_id=instance_id)

    @staticmethod
    def increment_usage(definition_id: uuid.UUID) -> None:
        """Count one use of a public voucher, enforcing usage_limit in the same UPDATE."""
        updated = (
            VoucherDefinition.objects.filter(pk=definition_id)
            .filter(Q(usage_limit__isnull=True) | Q(used_count__lt=F("usage_limit")))
            .update(used_count=F("used_count") + 1)
        )
        if updated:
            return
        if VoucherDefinition.objects.filter(pk=definition_id).exists():
            raise UsageExhausted(definition_id=definition_id)
        raise NotFound("Voucher not found", definition_id=definition_id)

    @staticmethod
    def decrement_usage(definition_id: uuid.UUID) -> bool:
        """Give back one use, never below zero."""
        return bool(
            VoucherDefinition.objects.filter(pk=definition_id, used_count__gt=0).update(used_count=F("used_count") - 1)
        )

    @staticmethod
    def purge_expired(user: User | None = None, now: datetime | None = None) -> int:
        """
        Delete unused instances whose validity ended.

        Instances still referenced by a live order are kept.
        """
        from apps.orders.models import Order  # noqa: PLC0415

        now = now or timezone.now()
        live_codes = Order.objects.exclude(status__in=Order.CLOSED_STATUSES).exclude(voucher_code="")
        expired = RedeemedVoucherInstance.objects.filter(is_used=False, valid_until__lt=now).exclude(
            voucher_code__in=live_codes.values("voucher_code")
        )
        if user is not None:
            expired = expired.filter(user=user)

        deleted, _details = expired.delete()
        if deleted:
            logger.info("🧹 [Voucher] Purged %d expired voucher instances", deleted)
        return deleted

    @staticmethod
    def saved_codes(user: User) -> list[str]:
        """Original codes of the user's unused instances."""
        return sorted(
            set(
                RedeemedVoucherInstance.objects.filter(user=user, is_used=False).values_list(
                    "original_code", flat=True
                )
            )
        )
