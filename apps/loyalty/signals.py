"""
Signal handlers for the Loyalty app.
Tier cache invalidation and audit logging for tier changes.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from apps.common.audit import get_model_changes, log_audit_event, store_old_values

from .models import LoyaltyTier
from .services import TierResolver

logger = logging.getLogger(__name__)

TIER_AUDIT_FIELDS = ["slug", "name", "min_points", "discount_percent", "free_shipping_threshold"]


@receiver(pre_save, sender=LoyaltyTier)
def tier_pre_save(sender: type, instance: LoyaltyTier, **kwargs: Any) -> None:
    """Store old values before tier save."""
    store_old_values(instance, TIER_AUDIT_FIELDS)


@receiver(post_save, sender=LoyaltyTier)
def tier_post_save(sender: type, instance: LoyaltyTier, created: bool, **kwargs: Any) -> None:
    """Drop the cached ladder and log tier creation/updates."""
    TierResolver.invalidate()
    # Drop again after commit so a concurrent read cannot re-cache the old ladder
    transaction.on_commit(TierResolver.invalidate)

    if created:
        log_audit_event(
            "loyalty_tier_created",
            instance,
            description=f"Loyalty tier '{instance.name}' created",
            new_values={f: getattr(instance, f) for f in TIER_AUDIT_FIELDS},
        )
        return

    old_values, new_values = get_model_changes(instance, TIER_AUDIT_FIELDS)
    if new_values:
        log_audit_event(
            "loyalty_tier_updated",
            instance,
            description=f"Loyalty tier '{instance.name}' updated",
            old_values=old_values,
            new_values=new_values,
        )


@receiver(post_delete, sender=LoyaltyTier)
def tier_post_delete(sender: type, instance: LoyaltyTier, **kwargs: Any) -> None:
    TierResolver.invalidate()
    transaction.on_commit(TierResolver.invalidate)
    log_audit_event("loyalty_tier_deleted", instance, description=f"Loyalty tier '{instance.name}' deleted")
