"""
Back-office API Serializers for the storefront platform.
Staff CRUD for loyalty tiers and vouchers, order overrides and customer listings.
"""

import copy
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import models
from rest_framework import serializers

from apps.api.checkout.serializers import OrderItemSerializer, OrderStatusHistorySerializer
from apps.loyalty.models import LoyaltyTier
from apps.loyalty.services import TierResolver
from apps.orders.models import Order
from apps.promotions.models import VoucherDefinition, normalize_code
from apps.users.models import User


class ModelCleanMixin:
    """Run the model's ``clean()`` on a candidate instance so admin rules hold over the API too"""

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        attrs = super().validate(attrs)  # type: ignore[misc]
        model: type[models.Model] = self.Meta.model  # type: ignore[attr-defined]
        candidate = copy.copy(self.instance) if self.instance is not None else model()  # type: ignore[attr-defined]
        for field, value in attrs.items():
            setattr(candidate, field, value)
        try:
            candidate.clean()
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.message_dict if hasattr(e, "error_dict") else e.messages) from e
        return attrs


# ===============================================================================
# LOYALTY TIERS
# ===============================================================================


class LoyaltyTierSerializer(ModelCleanMixin, serializers.ModelSerializer):
    class Meta:
        model = LoyaltyTier
        fields = (
            "id",
            "slug",
            "name",
            "description",
            "min_points",
            "discount_percent",
            "free_shipping_threshold",
            "benefits",
            "icon",
            "badge_color",
            "sort_order",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "created_at", "updated_at")

    def validate_slug(self, value: str) -> str:
        return value.lower().strip()


# ===============================================================================
# VOUCHERS
# ===============================================================================


class VoucherDefinitionSerializer(ModelCleanMixin, serializers.ModelSerializer):
    remaining_uses = serializers.IntegerField(read_only=True)

    class Meta:
        model = VoucherDefinition
        fields = (
            "id",
            "code",
            "description",
            "icon",
            "type",
            "value",
            "max_discount",
            "min_order",
            "target_category",
            "target_user",
            "valid_from",
            "valid_until",
            "usage_limit",
            "used_count",
            "remaining_uses",
            "is_public",
            "points_cost",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "used_count", "created_at", "updated_at")

    def validate_code(self, value: str) -> str:
        code = normalize_code(value)
        queryset = VoucherDefinition.objects.filter(code=code)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A voucher with this code already exists")
        return code


# ===============================================================================
# ORDERS
# ===============================================================================


class AdminOrderSerializer(serializers.ModelSerializer):
    """Full order view for staff"""

    customer_email = serializers.EmailField(source="user.email", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = (
            "id",
            "order_number",
            "customer_email",
            "status",
            "status_display",
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
            "full_name",
            "phone",
            "address",
            "note",
            "payment_method",
            "payment_status",
            "cancelled_at",
            "rewards_reversed",
            "items",
            "status_history",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    """Manual status override; accepts display aliases such as ``Completed``"""

    status = serializers.CharField(max_length=20)
    note = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate_status(self, value: str) -> str:
        normalized = Order.normalize_status(value)
        if normalized is None:
            raise serializers.ValidationError(f"Unknown order status '{value}'")
        return normalized


# ===============================================================================
# CUSTOMERS
# ===============================================================================


class CustomerSerializer(serializers.ModelSerializer):
    """Customer with balances and resolved loyalty tier"""

    full_name = serializers.CharField(source="get_full_name", read_only=True)
    tier = serializers.SerializerMethodField()
    order_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "full_name",
            "phone",
            "points",
            "total_points",
            "tier",
            "order_count",
            "date_joined",
        )

    def get_tier(self, obj: User) -> dict[str, Any]:
        tiers = self.context.get("tiers") or TierResolver.get_tiers()
        tier = TierResolver.resolve(obj.total_points, tiers).current
        return {"slug": tier.slug, "name": tier.name, "icon": tier.icon}
