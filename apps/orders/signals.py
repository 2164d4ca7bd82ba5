"""
Order signals for the storefront checkout platform.
Audit logging for order creation and status history.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db.models.signals import post_save
from django.dispatch import receiver

from apps.common.audit import log_audit_event

from .models import Order, OrderStatusHistory

logger = logging.getLogger(__name__)

# ===============================================================================
# ORDER LIFECYCLE SIGNALS
# ===============================================================================


@receiver(post_save, sender=Order)
def order_post_save(sender: type[Order], instance: Order, created: bool, **kwargs: Any) -> None:
    """Record order creation in the audit trail."""
    if not created:
        return

    log_audit_event(
        "order_created",
        instance,
        description=f"Order {instance.order_number} created",
        new_values={
            "order_number": instance.order_number,
            "status": instance.status,
            "total": instance.total,
            "earned_points": instance.earned_points,
            "voucher_code": instance.voucher_code,
            "tier_slug": instance.tier_slug,
            "user_id": str(instance.user_id),
        },
    )


@receiver(post_save, sender=OrderStatusHistory)
def status_history_post_save(
    sender: type[OrderStatusHistory], instance: OrderStatusHistory, created: bool, **kwargs: Any
) -> None:
    """Audit status changes from the tracking timeline."""
    if not created or not instance.old_status:
        return

    log_audit_event(
        "order_status_changed",
        instance.order,
        description=f"Order {instance.order.order_number}: {instance.old_status} → {instance.new_status}",
        old_values={"status": instance.old_status},
        new_values={"status": instance.new_status},
    )
    logger.info(
        "📦 [Order] %s status %s → %s%s",
        instance.order.order_number,
        instance.old_status,
        instance.new_status,
        " (automatic)" if instance.is_automatic else "",
    )
