"""
Loyalty app configuration for the storefront checkout platform.
"""

from django.apps import AppConfig


class LoyaltyConfig(AppConfig):
    """Configuration for the Loyalty app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.loyalty"
    verbose_name = "Loyalty Tiers & Rewards"

    def ready(self) -> None:
        """Import signals when app is ready."""
        from . import signals  # noqa: F401
