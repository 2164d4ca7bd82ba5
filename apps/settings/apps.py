"""
Settings app configuration for the storefront checkout platform.
"""

from django.apps import AppConfig


class SettingsConfig(AppConfig):
    """Configuration for the runtime Settings app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.settings"
    verbose_name = "System Settings"

    def ready(self) -> None:
        """Import signals when app is ready."""
        from . import signals  # noqa: F401
