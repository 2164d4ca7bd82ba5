"""
Orders app configuration for the storefront checkout platform.
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Configuration for the Orders app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.orders"
    verbose_name = "Orders"

    def ready(self) -> None:
        """Import signals when app is ready."""
        from . import signals  # noqa: F401
