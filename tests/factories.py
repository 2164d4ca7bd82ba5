"""
Shared builders for checkout tests.
"""

from datetime import timedelta
from typing import Any

from django.utils import timezone

from apps.loyalty.models import LoyaltyTier
from apps.orders.pricing import CartLine
from apps.orders.services import CheckoutData
from apps.promotions.models import RedeemedVoucherInstance, VoucherDefinition
from apps.users.models import User


def create_user(email: str = "customer@example.com", points: int = 0, total_points: int = 0, **extra: Any) -> User:
    user = User.objects.create_user(email=email, password="testpass123", **extra)
    if points or total_points:
        User.objects.filter(pk=user.pk).update(points=points, total_points=total_points)
        user.refresh_from_db()
    return user


def create_voucher(code: str = "SAVE20K", **overrides: Any) -> VoucherDefinition:
    fields: dict[str, Any] = {
        "type": "fixed",
        "value": 20000,
        "is_public": True,
        "is_active": True,
    }
    fields.update(overrides)
    return VoucherDefinition.objects.create(code=code, **fields)


def create_instance(user: User, definition: VoucherDefinition, **overrides: Any) -> RedeemedVoucherInstance:
    fields: dict[str, Any] = {
        "user": user,
        "voucher_code": f"{definition.code}_ABC123",
        "original_code": definition.code,
        "definition": definition,
        "type": definition.type,
        "value": definition.value,
        "max_discount": definition.max_discount,
        "min_order": definition.min_order,
        "target_category": definition.target_category,
        "valid_until": definition.valid_until,
        "points_spent": definition.points_cost,
    }
    fields.update(overrides)
    return RedeemedVoucherInstance.objects.create(**fields)


def create_default_tiers() -> list[LoyaltyTier]:
    return [
        LoyaltyTier.objects.create(slug="bronze", name="Bronze", min_points=0, discount_percent=0),
        LoyaltyTier.objects.create(
            slug="silver", name="Silver", min_points=1000, discount_percent=5, free_shipping_threshold=200000
        ),
        LoyaltyTier.objects.create(
            slug="gold", name="Gold", min_points=5000, discount_percent=10, free_shipping_threshold=100000
        ),
    ]


def cart(*lines: tuple[int, int, str]) -> list[CartLine]:
    """Build cart lines from (unit_price, quantity, category) tuples"""
    return [
        CartLine(
            product_id=f"p{index}",
            product_name=f"Product {index}",
            quantity=quantity,
            unit_price=unit_price,
            category=category,
        )
        for index, (unit_price, quantity, category) in enumerate(lines, start=1)
    ]


def checkout_data(**overrides: Any) -> CheckoutData:
    fields: dict[str, Any] = {
        "full_name": "Nguyen Van A",
        "phone": "0901234567",
        "address": "12 Le Loi, District 1",
        "payment_method": "cod",
    }
    fields.update(overrides)
    return CheckoutData(**fields)


def days_from_now(days: int) -> Any:
    return timezone.now() + timedelta(days=days)
