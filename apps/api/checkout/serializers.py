"""
Checkout API Serializers for the storefront platform.
Cart input, pricing output, vouchers, loyalty and customer orders.
"""

from typing import Any

from rest_framework import serializers

from apps.orders.models import Order, OrderItem, OrderStatusHistory
from apps.orders.pricing import CartLine
from apps.promotions.models import RedeemedVoucherInstance, VoucherDefinition

# ===============================================================================
# CART INPUT
# ===============================================================================


class CartItemInputSerializer(serializers.Serializer):
    """One cart line as sent by the storefront"""

    product_id = serializers.CharField(max_length=64)
    product_name = serializers.CharField(max_length=255)
    quantity = serializers.IntegerField(min_value=1, max_value=999)
    unit_price = serializers.IntegerField(min_value=0)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")


class CartInputSerializer(serializers.Serializer):
    items = CartItemInputSerializer(many=True, allow_empty=False)
    subtotal = serializers.IntegerField(min_value=0, required=False, allow_null=True, default=None)

    def cart_lines(self) -> list[CartLine]:
        return [CartLine(**item) for item in self.validated_data["items"]]


class CheckoutPreviewInputSerializer(CartInputSerializer):
    voucher_code = serializers.CharField(max_length=80, required=False, allow_blank=True, allow_null=True)


class VoucherApplyInputSerializer(CartInputSerializer):
    code = serializers.CharField(max_length=80)


class OrderCreateInputSerializer(CartInputSerializer):
    """Order placement: cart plus delivery details"""

    full_name = serializers.CharField(max_length=200)
    phone = serializers.CharField(max_length=20)
    address = serializers.CharField()
    note = serializers.CharField(required=False, allow_blank=True, default="")
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES, default="cod")
    voucher_code = serializers.CharField(max_length=80, required=False, allow_blank=True, allow_null=True)


class OrderCancelInputSerializer(serializers.Serializer):
    note = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class VoucherRedeemInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)


# ===============================================================================
# VOUCHERS
# ===============================================================================


class PublicVoucherSerializer(serializers.ModelSerializer):
    """Storefront view of a public or redeemable voucher"""

    remaining_uses = serializers.IntegerField(read_only=True)

    class Meta:
        model = VoucherDefinition
        fields = (
            "code",
            "description",
            "icon",
            "type",
            "value",
            "max_discount",
            "min_order",
            "target_category",
            "valid_from",
            "valid_until",
            "points_cost",
            "remaining_uses",
        )


class RedeemedVoucherSerializer(serializers.ModelSerializer):
    class Meta:
        model = RedeemedVoucherInstance
        fields = (
            "id",
            "voucher_code",
            "original_code",
            "description",
            "icon",
            "type",
            "value",
            "max_discount",
            "min_order",
            "target_category",
            "valid_until",
            "points_spent",
            "is_used",
            "redeemed_at",
        )


# ===============================================================================
# ORDERS
# ===============================================================================


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ("product_id", "product_name", "category", "quantity", "unit_price", "line_total")


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    """Tracking timeline entry"""

    class Meta:
        model = OrderStatusHistory
        fields = ("old_status", "new_status", "note", "is_automatic", "created_at")


class OrderListSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = (
            "id",
            "order_number",
            "status",
            "status_display",
            "total",
            "earned_points",
            "voucher_code",
            "item_count",
            "created_at",
        )

    def get_item_count(self, obj: Order) -> int:
        return sum(item.quantity for item in obj.items.all())


class OrderDetailSerializer(serializers.ModelSerializer):
    """Order with price breakdown, line items and tracking history"""

    status_display = serializers.CharField(source="get_status_display", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)
    can_be_cancelled = serializers.BooleanField(read_only=True)
    tier = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = (
            "id",
            "order_number",
            "status",
            "status_display",
            "subtotal",
            "shipping_fee",
            "tier_discount_amount",
            "voucher_discount_amount",
            "total",
            "earned_points",
            "voucher_code",
            "tier",
            "full_name",
            "phone",
            "address",
            "note",
            "payment_method",
            "payment_status",
            "can_be_cancelled",
            "cancelled_at",
            "items",
            "status_history",
            "created_at",
            "updated_at",
        )

    def get_tier(self, obj: Order) -> dict[str, Any]:
        return {"slug": obj.tier_slug, "name": obj.tier_name, "discount_percent": obj.tier_discount_percent}
