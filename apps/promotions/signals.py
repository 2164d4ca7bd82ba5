"""
Signal handlers for Promotions app.
Audit logging for voucher definition changes.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db.models.signals import post_save, pre_delete, pre_save
from django.dispatch import receiver

from apps.common.audit import get_model_changes, log_audit_event, store_old_values

from .models import VoucherDefinition

logger = logging.getLogger(__name__)

VOUCHER_AUDIT_FIELDS = [
    "code",
    "type",
    "value",
    "max_discount",
    "min_order",
    "usage_limit",
    "is_active",
    "is_public",
    "points_cost",
    "valid_from",
    "valid_until",
]


# ===============================================================================
# Voucher Signals
# ===============================================================================


@receiver(pre_save, sender=VoucherDefinition)
def voucher_pre_save(sender: type, instance: VoucherDefinition, **kwargs: Any) -> None:
    """Store old values before voucher save."""
    store_old_values(instance, VOUCHER_AUDIT_FIELDS)


@receiver(post_save, sender=VoucherDefinition)
def voucher_post_save(sender: type, instance: VoucherDefinition, created: bool, **kwargs: Any) -> None:
    """Log voucher creation and updates."""
    if created:
        log_audit_event(
            "voucher_created",
            instance,
            description=f"Voucher '{instance.code}' created",
            new_values={
                "type": instance.type,
                "value": instance.value,
                "is_public": instance.is_public,
                "points_cost": instance.points_cost,
            },
        )
        return

    old_values, new_values = get_model_changes(instance, VOUCHER_AUDIT_FIELDS)
    if not new_values:
        return

    log_audit_event(
        "voucher_updated",
        instance,
        description=f"Voucher '{instance.code}' updated",
        old_values=old_values,
        new_values=new_values,
    )
    if "is_active" in new_values and not instance.is_active:
        logger.info("⏸️ [Voucher] %s deactivated", instance.code)


@receiver(pre_delete, sender=VoucherDefinition)
def voucher_pre_delete(sender: type, instance: VoucherDefinition, **kwargs: Any) -> None:
    """Log voucher deletion. Redeemed instances keep their snapshot."""
    log_audit_event(
        "voucher_deleted",
        instance,
        description=f"Voucher '{instance.code}' deleted",
        old_values={"used_count": instance.used_count, "instances": instance.instances.count()},
    )
