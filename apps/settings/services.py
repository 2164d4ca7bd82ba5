"""
System Settings service layer for the storefront checkout platform
Store-wide checkout constants with caching and type safety.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

from django.core.cache import cache

from apps.common.security_decorators import monitor_performance

from .models import SystemSetting

logger = logging.getLogger(__name__)

# Type alias for setting values
SettingValue = str | int | bool | list[Any] | dict[str, Any] | None

# Cache lifetime for fallback defaults (missing rows)
DEFAULT_VALUE_CACHE_TIMEOUT = 300


class SettingsService:
    """⚙️ Centralized settings management with caching"""

    # Cache configuration
    CACHE_PREFIX: ClassVar[str] = "storefront_setting"
    CACHE_TIMEOUT: ClassVar[int] = 3600  # 1 hour
    CACHE_VERSION: ClassVar[int] = 1

    # Default settings values
    DEFAULT_SETTINGS: ClassVar[dict[str, Any]] = {
        # Checkout pricing
        "checkout.base_free_shipping_threshold": 300000,
        "checkout.flat_shipping_fee": 20000,
        "checkout.points_per_unit": 10000,
        # Storage conflict retry budget
        "checkout.max_retries": 3,
        # Loyalty
        "loyalty.tier_cache_timeout": 3600,
    }

    @classmethod
    def _get_cache_key(cls, key: str) -> str:
        """Generate cache key for setting"""
        return f"{cls.CACHE_PREFIX}:{key}"

    @classmethod
    def _clear_setting_cache(cls, key: str) -> None:
        cache.delete(cls._get_cache_key(key), version=cls.CACHE_VERSION)

    @classmethod
    @monitor_performance()
    def get_setting(cls, key: str, default: Any = None) -> SettingValue:
        """
        🔍 Get setting value with caching

        Args:
            key: Setting key (e.g., 'checkout.flat_shipping_fee')
            default: Default value if setting not found and not in DEFAULT_SETTINGS

        Returns:
            Setting value or default
        """
        cache_key = cls._get_cache_key(key)

        cached_value = cache.get(cache_key, version=cls.CACHE_VERSION)
        if cached_value is not None:
            logger.debug("✅ [Settings] Cache hit for key: %s", key)
            return cached_value  # type: ignore[no-any-return]

        setting = SystemSetting.objects.filter(key=key, is_active=True).first()
        if setting is not None:
            value = setting.get_typed_value()
            cache.set(cache_key, value, timeout=cls.CACHE_TIMEOUT, version=cls.CACHE_VERSION)
            logger.debug("⚡ [Settings] Database hit for key: %s (cached)", key)
            return value  # type: ignore[no-any-return]

        # Use default from DEFAULT_SETTINGS or provided default
        fallback_value = cls.DEFAULT_SETTINGS.get(key, default)
        cache.set(cache_key, fallback_value, timeout=DEFAULT_VALUE_CACHE_TIMEOUT, version=cls.CACHE_VERSION)
        logger.debug("⚠️ [Settings] Using default for missing key: %s", key)
        return fallback_value  # type: ignore[no-any-return]

    @classmethod
    def get_integer_setting(cls, key: str, default: int = 0) -> int:
        """🔢 Get integer setting with type safety"""
        value = cls.get_setting(key, default)
        try:
            return int(value)  # type: ignore[arg-type]
        except (ValueError, TypeError):
            logger.warning("⚠️ [Settings] Invalid integer value for %s: %s", key, value)
            return default

    @classmethod
    def set_setting(cls, key: str, value: Any) -> SystemSetting:
        """
        🔧 Create or update a setting and drop its cached value
        """
        data_type = cls._infer_data_type(value)
        setting, created = SystemSetting.objects.update_or_create(
            key=key,
            defaults={
                "value": value,
                "data_type": data_type,
                "name": cls._generate_name_from_key(key),
                "default_value": cls.DEFAULT_SETTINGS.get(key),
            },
        )
        cls._clear_setting_cache(key)
        logger.info("⚡ [Settings] %s %s = %s", "Created" if created else "Updated", key, value)
        return setting

    @classmethod
    def reset_to_default(cls, key: str) -> None:
        """↩️ Remove a stored override so DEFAULT_SETTINGS applies again"""
        SystemSetting.objects.filter(key=key).delete()
        cls._clear_setting_cache(key)
        logger.info("↩️ [Settings] Reset %s to default", key)

    @staticmethod
    def _infer_data_type(value: Any) -> str:
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, int):
            return "integer"
        if isinstance(value, str):
            return "string"
        return "json"

    @staticmethod
    def _generate_name_from_key(key: str) -> str:
        """Generate human-readable name from setting key"""
        return key.split(".")[-1].replace("_", " ").title()
