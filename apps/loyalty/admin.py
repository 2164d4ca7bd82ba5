"""
Loyalty admin for the storefront checkout platform.
"""

from typing import ClassVar

from django.contrib import admin

from .models import LoyaltyTier, LoyaltyTransaction


@admin.register(LoyaltyTier)
class LoyaltyTierAdmin(admin.ModelAdmin):
    list_display: ClassVar = ["name", "slug", "min_points", "discount_percent", "free_shipping_threshold", "icon"]
    search_fields: ClassVar = ["name", "slug"]
    ordering: ClassVar = ["min_points"]


@admin.register(LoyaltyTransaction)
class LoyaltyTransactionAdmin(admin.ModelAdmin):
    """Read-only view of the reward ledger"""

    list_display: ClassVar = ["user", "transaction_type", "points", "lifetime_points", "balance_after", "created_at"]
    list_filter: ClassVar = ["transaction_type"]
    search_fields: ClassVar = ["user__email", "voucher_code", "order__order_number"]
    readonly_fields: ClassVar = [
        "user",
        "transaction_type",
        "points",
        "lifetime_points",
        "balance_after",
        "order",
        "voucher_code",
        "description",
        "created_at",
    ]

    def has_add_permission(self, request):  # type: ignore[no-untyped-def]
        return False
