"""
Checkout pricing for the storefront platform.

DiscountComposer turns a cart, the buyer's loyalty tier and an accepted
voucher into shipping fee, discounts, payable total and earned points.
It is pure: store-wide constants arrive as a PricingPolicy value.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from apps.common.types import Amount, CategorySlug, Points
from apps.promotions.services import FixedVoucher, FreeshipVoucher, PercentVoucher, VoucherTerms

if TYPE_CHECKING:
    from apps.loyalty.services import TierSnapshot

PERCENT = 100


# ===============================================================================
# PRICING VALUES
# ===============================================================================


@dataclass(frozen=True)
class CartLine:
    """One cart row as supplied by the catalog"""

    product_id: str
    product_name: str
    quantity: int
    unit_price: Amount
    category: CategorySlug = ""

    @property
    def line_total(self) -> Amount:
        return self.quantity * self.unit_price


def cart_subtotal(lines: Iterable[CartLine]) -> Amount:
    return sum(line.line_total for line in lines)


@dataclass(frozen=True)
class PricingPolicy:
    """Store-wide checkout constants"""

    base_free_shipping_threshold: Amount = 300000
    flat_shipping_fee: Amount = 20000
    points_per_unit: Amount = 10000

    @classmethod
    def from_settings(cls) -> PricingPolicy:
        """Read the current values from the runtime settings store"""
        from apps.settings.services import SettingsService  # noqa: PLC0415

        defaults = cls()
        return cls(
            base_free_shipping_threshold=SettingsService.get_integer_setting(
                "checkout.base_free_shipping_threshold", defaults.base_free_shipping_threshold
            ),
            flat_shipping_fee=SettingsService.get_integer_setting(
                "checkout.flat_shipping_fee", defaults.flat_shipping_fee
            ),
            points_per_unit=SettingsService.get_integer_setting("checkout.points_per_unit", defaults.points_per_unit),
        )


@dataclass(frozen=True)
class PricingBreakdown:
    subtotal: Amount
    shipping_fee: Amount
    tier_discount: Amount
    voucher_discount: Amount
    total: Amount
    earned_points: Points
    free_shipping_threshold: Amount
    amount_to_free_shipping: Amount

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ===============================================================================
# DISCOUNT COMPOSER
# ===============================================================================


class DiscountComposer:
    """🧮 Compose tier discount, voucher discount and shipping into a payable total"""

    @staticmethod
    def free_shipping_threshold(tier: TierSnapshot | None, policy: PricingPolicy) -> Amount:
        """A tier override replaces the store threshold entirely"""
        if tier is not None and tier.free_shipping_threshold is not None:
            return tier.free_shipping_threshold
        return policy.base_free_shipping_threshold

    @classmethod
    def shipping_fee(cls, subtotal: Amount, tier: TierSnapshot | None, policy: PricingPolicy) -> Amount:
        if subtotal <= 0:
            return 0
        if subtotal >= cls.free_shipping_threshold(tier, policy):
            return 0
        return policy.flat_shipping_fee

    @staticmethod
    def tier_discount(subtotal: Amount, tier: TierSnapshot | None) -> Amount:
        if tier is None or not tier.discount_percent or subtotal <= 0:
            return 0
        return subtotal * tier.discount_percent // PERCENT

    @staticmethod
    def voucher_discount(
        voucher: VoucherTerms | None, subtotal: Amount, shipping_fee: Amount, tier_discount: Amount
    ) -> Amount:
        if voucher is None:
            return 0

        if isinstance(voucher, PercentVoucher):
            discount = max(0, subtotal) * voucher.value // PERCENT
            if voucher.max_discount is not None:
                discount = min(discount, voucher.max_discount)
            return discount

        if isinstance(voucher, FreeshipVoucher):
            return min(voucher.value, shipping_fee)

        if isinstance(voucher, FixedVoucher):
            payable = max(0, subtotal + shipping_fee - tier_discount)
            return min(voucher.value, payable)

        raise TypeError(f"Unsupported voucher terms: {type(voucher).__name__}")

    @staticmethod
    def earned_points(subtotal: Amount, policy: PricingPolicy) -> Points:
        if policy.points_per_unit <= 0 or subtotal <= 0:
            return 0
        return subtotal // policy.points_per_unit

    @classmethod
    def compose(
        cls,
        cart_items: Iterable[CartLine],
        subtotal: Amount,
        tier: TierSnapshot | None,
        voucher: VoucherTerms | None,
        policy: PricingPolicy | None = None,
    ) -> PricingBreakdown:
        """
        Price a cart against an already verified ``subtotal``.
        """
        policy = policy or PricingPolicy()
        subtotal = max(0, subtotal)

        threshold = cls.free_shipping_threshold(tier, policy)
        shipping = cls.shipping_fee(subtotal, tier, policy)
        tier_discount = cls.tier_discount(subtotal, tier)
        voucher_discount = cls.voucher_discount(voucher, subtotal, shipping, tier_discount)
        total = max(0, subtotal + shipping - tier_discount - voucher_discount)

        return PricingBreakdown(
            subtotal=subtotal,
            shipping_fee=shipping,
            tier_discount=tier_discount,
            voucher_discount=voucher_discount,
            total=total,
            earned_points=cls.earned_points(subtotal, policy),
            free_shipping_threshold=threshold,
            amount_to_free_shipping=max(0, threshold - subtotal) if shipping else 0,
        )
