"""
System Settings signals for the storefront checkout platform
Cache invalidation when settings change outside SettingsService.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import SystemSetting
from .services import SettingsService

logger = logging.getLogger(__name__)


@receiver(post_save, sender=SystemSetting)
def handle_setting_saved(sender: Any, instance: SystemSetting, created: bool, **kwargs: Any) -> None:
    """🔄 Clear cache for the updated setting"""
    SettingsService._clear_setting_cache(instance.key)
    logger.info(
        "✅ [Settings Signal] Setting %s %s: %s",
        instance.key,
        "create" if created else "update",
        instance.get_typed_value(),
    )


@receiver(post_delete, sender=SystemSetting)
def handle_setting_deleted(sender: Any, instance: SystemSetting, **kwargs: Any) -> None:
    """🗑️ Clear cache for the deleted setting"""
    SettingsService._clear_setting_cache(instance.key)
    logger.info("🗑️ [Settings Signal] Setting deleted: %s", instance.key)
