"""
Voucher background tasks.

Django-Q2 tasks for voucher inventory housekeeping.
"""

from __future__ import annotations

import logging
from typing import Any

from django_q.models import Schedule
from django_q.tasks import schedule

from apps.promotions.services import VoucherInventory

logger = logging.getLogger(__name__)

PURGE_SCHEDULE_NAME = "vouchers-purge-expired"


def purge_expired_vouchers() -> dict[str, Any]:
    """
    Remove expired, unused redeemed vouchers from every customer's inventory.

    Advisory sweep: the validator already rejects expired instances, this only
    keeps inventories tidy.
    """
    logger.info("🧹 [VoucherTasks] Purging expired voucher instances")
    deleted = VoucherInventory.purge_expired()
    logger.info("✅ [VoucherTasks] Purged %d expired voucher instances", deleted)
    return {"success": True, "deleted": deleted}


# ===============================================================================
# SCHEDULED TASKS SETUP
# ===============================================================================


def setup_voucher_scheduled_tasks() -> dict[str, str]:
    """Set up voucher housekeeping scheduled tasks."""
    tasks_created = {}

    if not Schedule.objects.filter(name=PURGE_SCHEDULE_NAME).exists():
        # Daily at 3 AM
        schedule(
            "apps.promotions.tasks.purge_expired_vouchers",
            schedule_type=Schedule.CRON,
            cron="0 3 * * *",
            name=PURGE_SCHEDULE_NAME,
            cluster="storefront-cluster",
        )
        tasks_created["purge_expired"] = "created"
    else:
        tasks_created["purge_expired"] = "already_exists"

    logger.info("✅ [VoucherTasks] Scheduled tasks setup: %s", tasks_created)
    return tasks_created
