"""
Order services for the storefront checkout platform.
Order placement, status transitions and cancellation with reward reversal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypedDict

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.common.security_decorators import atomic_with_retry, monitor_performance
from apps.common.types import (
    Amount,
    BusinessError,
    Err,
    InvalidTransition,
    NotFound,
    Ok,
    PricingMismatch,
    Result,
    TransientFailure,
)
from apps.common.validators import log_security_event
from apps.loyalty.services import RewardLedger, TierResolver
from apps.promotions.models import RedeemedVoucherInstance, VoucherDefinition, VoucherUsage
from apps.promotions.services import VoucherInventory, VoucherTerms, VoucherValidator

from .models import Order, OrderItem, OrderStatusHistory
from .pricing import CartLine, DiscountComposer, PricingBreakdown, PricingPolicy, cart_subtotal

if TYPE_CHECKING:
    from apps.users.models import User

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


# ===============================================================================
# DATA CLASSES
# ===============================================================================


@dataclass
class CheckoutData:
    """Delivery and payment details submitted with an order"""

    full_name: str = ""
    phone: str = ""
    address: str = ""
    note: str = ""
    payment_method: str = "cod"
    voucher_code: str | None = None
    subtotal: Amount | None = None  # Client-side subtotal, verified against the lines


class DashboardStats(TypedDict):
    total_revenue: int
    total_orders: int
    pending_orders: int
    cancelled_orders: int
    total_customers: int


# ===============================================================================
# ORDER LIFECYCLE CONTROLLER
# ===============================================================================


class OrderLifecycleController:
    """
    📦 Order placement, status workflow and cancellation.

    Public methods return ``Result[Order, BusinessError]``. Every status change
    is gated on the status it was read in, so concurrent transitions cannot
    both apply, and reward reversal runs at most once per order.
    """

    CANCELLABLE_FROM: tuple[str, ...] = tuple(
        status for status, targets in Order.VALID_TRANSITIONS.items() if "cancelled" in targets
    )

    # Placement

    @classmethod
    def preview(
        cls, user: User, cart: Iterable[CartLine], voucher_code: str | None = None
    ) -> Result[dict[str, Any], BusinessError]:
        """Price a cart without persisting anything"""
        lines = list(cart)
        subtotal = cart_subtotal(lines)
        tier = TierResolver.tier_for(user)

        voucher: VoucherTerms | None = None
        voucher_error: BusinessError | None = None
        if voucher_code:
            validation = VoucherValidator.validate(voucher_code, user, lines, subtotal)
            if validation.is_valid:
                voucher = validation.voucher
            else:
                voucher_error = validation.error

        pricing = DiscountComposer.compose(lines, subtotal, tier, voucher, PricingPolicy.from_settings())
        return Ok(
            {
                "pricing": pricing.to_dict(),
                "tier": tier.to_dict(),
                "voucher": voucher.to_dict() if voucher else None,
                "voucher_error": voucher_error.to_dict() if voucher_error else None,
            }
        )

    @classmethod
    @monitor_performance(max_duration_seconds=10.0, alert_threshold=3.0)
    def place(cls, user: User, cart: Iterable[CartLine], checkout: CheckoutData) -> Result[Order, BusinessError]:
        """
        Create an order from a cart.

        The server recomputes the subtotal, resolves the tier, re-validates the
        voucher and prices the cart. Points credit and voucher consumption are
        the last writes of the same transaction, so any failure leaves nothing behind.
        """
        lines = list(cart)
        try:
            if not lines:
                raise BusinessError("Cart is empty")

            subtotal = cart_subtotal(lines)
            if checkout.subtotal is not None and checkout.subtotal != subtotal:
                raise PricingMismatch(client_subtotal=checkout.subtotal, server_subtotal=subtotal)

            order = cls._place(user, lines, subtotal, checkout)

        except BusinessError as e:
            logger.warning(
                "⛔ [Orders] Placement rejected for user %s: %s",
                user.pk,
                e.code,
                extra={"user_id": user.pk, "error_code": e.code, **e.context},
            )
            return Err(e)

        logger.info(
            "✅ [Orders] Placed %s for user %s, total %d, %d points",
            order.order_number,
            user.pk,
            order.total,
            order.earned_points,
            extra={"order_id": str(order.pk), "user_id": user.pk, "total": order.total},
        )
        return Ok(order)

    @classmethod
    @atomic_with_retry()
    def _place(cls, user: User, lines: list[CartLine], subtotal: Amount, checkout: CheckoutData) -> Order:
        user.refresh_from_db(fields=["points", "total_points"])
        tier = TierResolver.tier_for(user)

        voucher: VoucherTerms | None = None
        if checkout.voucher_code:
            validation = VoucherValidator.validate(checkout.voucher_code, user, lines, subtotal)
            if not validation.is_valid:
                raise validation.error or BusinessError(validation.error_message)
            voucher = validation.voucher

        pricing = DiscountComposer.compose(lines, subtotal, tier, voucher, PricingPolicy.from_settings())
        order = cls._create_order(user, lines, pricing, tier.slug, tier.name, tier.discount_percent, voucher, checkout)

        RewardLedger.credit(user, pricing.earned_points, order=order)

        if voucher is not None:
            if voucher.source == "instance":
                VoucherInventory.consume(voucher.record_id)
            else:
                VoucherInventory.increment_usage(voucher.record_id)
            VoucherUsage.objects.create(
                user=user,
                order=order,
                voucher_code=voucher.code,
                source=voucher.source,
                discount_amount=pricing.voucher_discount,
            )

        log_security_event(
            "order_placed",
            {
                "order_number": order.order_number,
                "order_id": str(order.pk),
                "user_id": str(user.pk),
                "total": order.total,
                "voucher_code": order.voucher_code,
            },
        )
        return order

    @staticmethod
    def _create_order(  # noqa: PLR0913
        user: User,
        lines: list[CartLine],
        pricing: PricingBreakdown,
        tier_slug: str,
        tier_name: str,
        tier_discount_percent: int,
        voucher: VoucherTerms | None,
        checkout: CheckoutData,
    ) -> Order:
        order = Order(
            user=user,
            status="pending",
            subtotal=pricing.subtotal,
            shipping_fee=pricing.shipping_fee,
            tier_discount_amount=pricing.tier_discount,
            voucher_discount_amount=pricing.voucher_discount,
            total=pricing.total,
            earned_points=pricing.earned_points,
            voucher_code=voucher.code if voucher else "",
            voucher_source=voucher.source if voucher else "",
            tier_slug=tier_slug,
            tier_name=tier_name,
            tier_discount_percent=tier_discount_percent,
            full_name=checkout.full_name or user.get_full_name(),
            phone=checkout.phone or user.phone,
            address=checkout.address or user.address,
            note=checkout.note,
            payment_method=checkout.payment_method,
            payment_status="unpaid" if checkout.payment_method == "cod" else "paid",
        )
        OrderLifecycleController._insert_with_order_number(order)

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    category=line.category,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in lines
            ]
        )

        OrderLifecycleController._create_status_history(order, "", "pending", "", user, is_automatic=True)
        return order

    @staticmethod
    def _insert_with_order_number(order: Order) -> None:
        """Insert the order, drawing a new number when a concurrent placement took the same one"""
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            order.order_number = ""
            try:
                with transaction.atomic():
                    order.save(force_insert=True)
                return
            except IntegrityError:
                if not Order.objects.filter(order_number=order.order_number).exists():
                    raise
                logger.warning(
                    "🔄 [Orders] Order number %s already taken, regenerating (attempt %d)",
                    order.order_number,
                    attempt,
                )

        raise TransientFailure("Could not allocate an order number", attempts=ORDER_NUMBER_ATTEMPTS)

    # Status workflow

    @classmethod
    def transition(
        cls,
        order: Order,
        new_status: str,
        note: str = "",
        changed_by: User | None = None,
        is_automatic: bool = False,
    ) -> Result[Order, BusinessError]:
        """Apply a legal status change. Moving to ``cancelled`` runs the cancellation reversal."""
        target = Order.normalize_status(new_status)
        if target is None:
            return Err(InvalidTransition(f"Unknown order status '{new_status}'", new_status=new_status))

        if target == "cancelled":
            return cls.cancel(order, changed_by=changed_by, note=note)

        try:
            return Ok(cls._transition(order, target, note, changed_by, is_automatic))
        except BusinessError as e:
            logger.warning(
                "⛔ [Orders] Transition of %s to %s rejected: %s",
                order.order_number,
                target,
                e.message,
            )
            return Err(e)

    @classmethod
    @atomic_with_retry()
    def _transition(
        cls, order: Order, target: str, note: str, changed_by: User | None, is_automatic: bool
    ) -> Order:
        current = cls._current_status(order)
        if not Order.is_allowed_transition(current, target):
            raise InvalidTransition(
                f"Cannot change order status from {current} to {target}", old_status=current, new_status=target
            )

        now = timezone.now()
        updated = Order.objects.filter(pk=order.pk, status=current).update(status=target, updated_at=now)
        if not updated:
            raise InvalidTransition("Order status changed concurrently", old_status=current, new_status=target)

        if target == "refunded":
            Order.objects.filter(pk=order.pk, payment_status="paid").update(payment_status="refunded")

        cls._create_status_history(order, current, target, note, changed_by, is_automatic=is_automatic)
        order.refresh_from_db()

        log_security_event(
            "order_status_changed",
            {
                "order_number": order.order_number,
                "order_id": str(order.pk),
                "old_status": current,
                "new_status": target,
                "user_id": str(changed_by.pk) if changed_by else None,
                "notes": note,
            },
        )
        return order

    # Cancellation

    @classmethod
    def cancel(
        cls,
        order: Order,
        changed_by: User | None = None,
        note: str = "",
        allowed_from: tuple[str, ...] | None = None,
    ) -> Result[Order, BusinessError]:
        """
        Cancel an order and give back its rewards exactly once.

        ``allowed_from`` narrows the statuses the order may be cancelled from;
        by default every status with a legal move to ``cancelled``. Cancelling an
        already cancelled order returns it unchanged.
        """
        try:
            return Ok(cls._cancel(order, changed_by, note, allowed_from or cls.CANCELLABLE_FROM))
        except BusinessError as e:
            logger.warning("⛔ [Orders] Cancellation of %s rejected: %s", order.order_number, e.message)
            return Err(e)

    @classmethod
    def cancel_by_customer(cls, order_id: Any, user: User, note: str = "") -> Result[Order, BusinessError]:
        """Customer-initiated cancellation, limited to own orders that are pending or confirmed"""
        order = Order.objects.filter(pk=order_id, user=user).first()
        if order is None:
            return Err(NotFound("Order not found", order_id=str(order_id)))

        if order.status != "cancelled" and not order.can_be_cancelled:
            return Err(
                InvalidTransition(
                    "This order can no longer be cancelled", old_status=order.status, new_status="cancelled"
                )
            )

        return cls.cancel(
            order,
            changed_by=user,
            note=note or "Cancelled by customer",
            allowed_from=Order.CUSTOMER_CANCELLABLE_STATUSES,
        )

    @classmethod
    @atomic_with_retry()
    def _cancel(cls, order: Order, changed_by: User | None, note: str, allowed_from: tuple[str, ...]) -> Order:
        current = cls._current_status(order)
        if current == "cancelled":
            order.refresh_from_db()
            return order

        if current not in allowed_from:
            raise InvalidTransition(
                f"Cannot cancel an order that is {current}", old_status=current, new_status="cancelled"
            )

        now = timezone.now()
        updated = Order.objects.filter(pk=order.pk, status=current).update(
            status="cancelled", cancelled_at=now, updated_at=now
        )
        if not updated:
            # Lost the race; whoever won owns the reversal
            order.refresh_from_db()
            if order.status == "cancelled":
                return order
            raise InvalidTransition("Order status changed concurrently", old_status=current, new_status="cancelled")

        cls._create_status_history(order, current, "cancelled", note, changed_by)

        if Order.objects.filter(pk=order.pk, rewards_reversed=False).update(rewards_reversed=True):
            cls._reverse_rewards(order)

        order.refresh_from_db()
        log_security_event(
            "order_cancelled",
            {
                "order_number": order.order_number,
                "order_id": str(order.pk),
                "old_status": current,
                "user_id": str(changed_by.pk) if changed_by else None,
                "points_reversed": order.earned_points,
                "voucher_code": order.voucher_code,
            },
        )
        return order

    @staticmethod
    def _reverse_rewards(order: Order) -> None:
        """Restore the voucher and take back the points granted at placement"""
        if order.voucher_source == "instance" and order.voucher_code:
            instance_id = (
                RedeemedVoucherInstance.objects.filter(voucher_code=order.voucher_code)
                .values_list("pk", flat=True)
                .first()
            )
            if instance_id is None:
                logger.warning(
                    "⚠️ [Orders] Voucher %s of %s no longer exists, nothing to restore",
                    order.voucher_code,
                    order.order_number,
                )
            else:
                try:
                    VoucherInventory.restore(instance_id)
                except InvalidTransition:
                    logger.warning(
                        "⚠️ [Orders] Voucher %s of %s was already available", order.voucher_code, order.order_number
                    )

        elif order.voucher_source == "definition" and order.voucher_code:
            definition_id = (
                VoucherDefinition.objects.filter(code=order.voucher_code).values_list("pk", flat=True).first()
            )
            if definition_id is None or not VoucherInventory.decrement_usage(definition_id):
                logger.warning(
                    "⚠️ [Orders] Usage of %s not decremented for %s", order.voucher_code, order.order_number
                )

        RewardLedger.reverse(order.user_id, order.earned_points, order=order)
        VoucherUsage.objects.filter(order=order, is_reversed=False).update(is_reversed=True, reversed_at=timezone.now())

        logger.info(
            "↩️ [Orders] Rewards reversed for %s: %d points, voucher %s",
            order.order_number,
            order.earned_points,
            order.voucher_code or "-",
        )

    # Helpers

    @staticmethod
    def _current_status(order: Order) -> str:
        current = Order.objects.filter(pk=order.pk).values_list("status", flat=True).first()
        if current is None:
            raise NotFound("Order not found", order_id=str(order.pk))
        return current  # type: ignore[no-any-return]

    @staticmethod
    def _create_status_history(  # noqa: PLR0913
        order: Order,
        old_status: str,
        new_status: str,
        note: str,
        changed_by: User | None,
        is_automatic: bool = False,
    ) -> None:
        """Create order status history entry"""
        OrderStatusHistory.objects.create(
            order=order,
            old_status=old_status,
            new_status=new_status,
            note=note or OrderStatusHistory.default_note(new_status),
            changed_by=changed_by,
            is_automatic=is_automatic,
        )


# ===============================================================================
# ORDER QUERY SERVICE
# ===============================================================================


class OrderQueryService:
    """Read-side helpers for order listings and the admin dashboard"""

    @staticmethod
    def orders_for_user(user: User) -> Any:
        return Order.objects.filter(user=user).prefetch_related("items").order_by("-created_at")

    @staticmethod
    def order_for_user(order_id: Any, user: User) -> Result[Order, BusinessError]:
        order = (
            Order.objects.filter(pk=order_id, user=user).prefetch_related("items", "status_history").first()
        )
        if order is None:
            return Err(NotFound("Order not found", order_id=str(order_id)))
        return Ok(order)

    @staticmethod
    def dashboard_stats() -> DashboardStats:
        """Revenue from delivered orders plus order and customer counts"""
        from apps.users.models import User  # noqa: PLC0415

        totals = Order.objects.aggregate(
            total_orders=Count("id"),
            pending_orders=Count("id", filter=Q(status="pending")),
            cancelled_orders=Count("id", filter=Q(status="cancelled")),
            total_revenue=Sum("total", filter=Q(status="delivered")),
        )
        return DashboardStats(
            total_revenue=totals["total_revenue"] or 0,
            total_orders=totals["total_orders"],
            pending_orders=totals["pending_orders"],
            cancelled_orders=totals["cancelled_orders"],
            total_customers=User.objects.filter(is_staff=False).count(),
        )
