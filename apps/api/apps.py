# ===============================================================================
# STOREFRONT API APP CONFIGURATION 🛠️
# ===============================================================================

from django.apps import AppConfig


class ApiConfig(AppConfig):
    """
    Configuration for the centralized checkout API app.

    - Checkout surface: pricing preview, vouchers, loyalty and orders
    - Back-office surface: tiers, vouchers, order overrides and dashboard
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.api"
    label = "storefront_api"
    verbose_name = "Storefront API"
