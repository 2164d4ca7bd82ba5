# ===============================================================================
# STOREFRONT API MAIN URLS 🚀
# ===============================================================================
#
# Central API routing, the single entry point for all API endpoints.
#
# URL Structure:
#   /api/checkout/  → Cart pricing, vouchers, loyalty status and customer orders
#   /api/admin/     → Staff back-office (tiers, vouchers, orders, dashboard)
#

from django.urls import include, path

from .backoffice import urls as backoffice_urls
from .checkout import urls as checkout_urls

app_name = "api"

# ===============================================================================
# API ROUTING 📍
# ===============================================================================

urlpatterns = [
    path("checkout/", include((checkout_urls, "checkout"))),
    path("admin/", include((backoffice_urls, "backoffice"))),
]
