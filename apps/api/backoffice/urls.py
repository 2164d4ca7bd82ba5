"""
Back-office API URLs for the storefront platform.
Staff-only endpoints mounted under /api/admin/.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from . import views

router = DefaultRouter()
router.register("tiers", views.LoyaltyTierViewSet, basename="tier")
router.register("vouchers", views.VoucherDefinitionViewSet, basename="voucher")
router.register("orders", views.AdminOrderViewSet, basename="order")
router.register("customers", views.CustomerViewSet, basename="customer")

app_name = "backoffice"

urlpatterns = [
    path("dashboard/", views.dashboard, name="dashboard"),
    # Router-based endpoints
    path("", include(router.urls)),
]
