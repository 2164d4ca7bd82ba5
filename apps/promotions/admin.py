"""
Django Admin configuration for the Promotions app.
"""

from django.contrib import admin

from .models import RedeemedVoucherInstance, VoucherDefinition, VoucherUsage


class RedeemedInstanceInline(admin.TabularInline):
    """Inline for redeemed instances of a voucher."""

    model = RedeemedVoucherInstance
    extra = 0
    readonly_fields = ("voucher_code", "user", "points_spent", "is_used", "used_at", "redeemed_at")
    fields = ("voucher_code", "user", "points_spent", "is_used", "used_at", "redeemed_at")
    can_delete = False
    max_num = 0


@admin.register(VoucherDefinition)
class VoucherDefinitionAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "type",
        "value",
        "max_discount",
        "min_order",
        "used_count",
        "usage_limit",
        "is_public",
        "points_cost",
        "is_active",
    )
    list_filter = ("type", "is_public", "is_active")
    search_fields = ("code", "description", "target_category")
    readonly_fields = ("used_count", "created_at", "updated_at")
    raw_id_fields = ("target_user",)
    inlines = (RedeemedInstanceInline,)

    fieldsets = (
        ("Voucher", {"fields": ("code", "description", "icon", "is_active")}),
        ("Discount", {"fields": ("type", "value", "max_discount")}),
        ("Eligibility", {"fields": ("min_order", "target_category", "target_user")}),
        ("Validity", {"fields": ("valid_from", "valid_until")}),
        ("Usage", {"fields": ("usage_limit", "used_count")}),
        ("Visibility", {"fields": ("is_public", "points_cost")}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )


@admin.register(RedeemedVoucherInstance)
class RedeemedVoucherInstanceAdmin(admin.ModelAdmin):
    list_display = ("voucher_code", "user", "type", "value", "points_spent", "is_used", "valid_until", "redeemed_at")
    list_filter = ("type", "is_used")
    search_fields = ("voucher_code", "original_code", "user__email")
    readonly_fields = ("voucher_code", "original_code", "points_spent", "is_used", "used_at", "redeemed_at")
    raw_id_fields = ("user", "definition")


@admin.register(VoucherUsage)
class VoucherUsageAdmin(admin.ModelAdmin):
    list_display = ("voucher_code", "user", "order", "source", "discount_amount", "is_reversed", "used_at")
    list_filter = ("source", "is_reversed")
    search_fields = ("voucher_code", "user__email", "order__order_number")
    readonly_fields = ("user", "order", "voucher_code", "source", "discount_amount", "is_reversed", "reversed_at")

    def has_add_permission(self, request):  # type: ignore[no-untyped-def]
        return False
