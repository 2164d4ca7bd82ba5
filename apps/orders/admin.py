"""
Django Admin configuration for the Orders app.
"""

from django.contrib import admin

from .models import Order, OrderItem, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product_id", "product_name", "category", "quantity", "unit_price", "line_total")
    can_delete = False
    max_num = 0


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ("old_status", "new_status", "note", "changed_by", "is_automatic", "created_at")
    can_delete = False
    max_num = 0


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-only order view. Status changes go through the lifecycle service
    so that cancellation reverses points and vouchers.
    """

    list_display = (
        "order_number",
        "user",
        "status",
        "total",
        "earned_points",
        "voucher_code",
        "tier_name",
        "payment_status",
        "created_at",
    )
    list_filter = ("status", "payment_method", "payment_status", "tier_slug")
    search_fields = ("order_number", "user__email", "full_name", "phone", "voucher_code")
    date_hierarchy = "created_at"
    raw_id_fields = ("user",)
    inlines = (OrderItemInline, OrderStatusHistoryInline)
    readonly_fields = (
        "order_number",
        "status",
        "subtotal",
        "shipping_fee",
        "tier_discount_amount",
        "voucher_discount_amount",
        "total",
        "earned_points",
        "voucher_code",
        "voucher_source",
        "tier_slug",
        "tier_name",
        "tier_discount_percent",
        "cancelled_at",
        "rewards_reversed",
        "created_at",
        "updated_at",
    )

    fieldsets = (
        ("Order", {"fields": ("order_number", "user", "status", "payment_method", "payment_status")}),
        (
            "Pricing",
            {
                "fields": (
                    "subtotal",
                    "shipping_fee",
                    "tier_discount_amount",
                    "voucher_discount_amount",
                    "total",
                    "earned_points",
                )
            },
        ),
        ("Discounts", {"fields": ("voucher_code", "voucher_source", "tier_slug", "tier_name", "tier_discount_percent")}),
        ("Delivery", {"fields": ("full_name", "phone", "address", "note")}),
        ("Cancellation", {"fields": ("cancelled_at", "rewards_reversed")}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )
