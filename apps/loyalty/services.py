"""
Loyalty services for the storefront checkout platform.

- TierResolver: maps lifetime points onto the tier ladder (pure resolution + cached ladder)
- RewardLedger: mints, spends and reverses reward points with conditional updates
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar

from django.core.cache import cache
from django.db.models import F, IntegerField, Value
from django.db.models.functions import Greatest

from apps.common.types import InsufficientPoints, NotFound, Points
from apps.settings.services import SettingsService
from apps.users.models import User

from .models import LoyaltyTier, LoyaltyTransaction

if TYPE_CHECKING:
    from apps.orders.models import Order

logger = logging.getLogger(__name__)

PERCENT = 100


# ===============================================================================
# TIER VALUES
# ===============================================================================


@dataclass(frozen=True)
class TierSnapshot:
    """Plain, immutable copy of a tier row used by pricing and resolution"""

    slug: str
    name: str
    min_points: Points
    discount_percent: int = 0
    free_shipping_threshold: int | None = None
    icon: str = ""
    badge_color: str = "gray"
    benefits: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_model(cls, tier: LoyaltyTier) -> TierSnapshot:
        return cls(
            slug=tier.slug,
            name=tier.name,
            min_points=tier.min_points,
            discount_percent=tier.discount_percent,
            free_shipping_threshold=tier.free_shipping_threshold,
            icon=tier.icon,
            badge_color=tier.badge_color,
            benefits=tuple(tier.benefits or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["benefits"] = list(self.benefits)
        return data


@dataclass(frozen=True)
class TierStatus:
    """Resolved tier plus progress toward the next one"""

    current: TierSnapshot
    next_tier: TierSnapshot | None
    progress: int
    points_to_next: Points
    is_max_tier: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_tier": self.current.to_dict(),
            "next_tier": self.next_tier.to_dict() if self.next_tier else None,
            "progress": self.progress,
            "points_to_next": self.points_to_next,
            "is_max_tier": self.is_max_tier,
        }


DEFAULT_TIERS: tuple[TierSnapshot, ...] = (
    TierSnapshot(
        slug="bronze",
        name="Bronze",
        min_points=0,
        discount_percent=0,
        free_shipping_threshold=None,
        icon="🥉",
        badge_color="amber",
        benefits=("Earn 1 point for every 10,000đ spent",),
    ),
    TierSnapshot(
        slug="silver",
        name="Silver",
        min_points=1000,
        discount_percent=5,
        free_shipping_threshold=200000,
        icon="🥈",
        badge_color="gray",
        benefits=("5% off every order", "Free shipping from 200,000đ"),
    ),
    TierSnapshot(
        slug="gold",
        name="Gold",
        min_points=5000,
        discount_percent=10,
        free_shipping_threshold=100000,
        icon="🥇",
        badge_color="yellow",
        benefits=("10% off every order", "Free shipping from 100,000đ"),
    ),
    TierSnapshot(
        slug="diamond",
        name="Diamond",
        min_points=15000,
        discount_percent=15,
        free_shipping_threshold=0,
        icon="💎",
        badge_color="cyan",
        benefits=("15% off every order", "Free shipping on every order"),
    ),
)


# ===============================================================================
# TIER RESOLVER
# ===============================================================================


class TierResolver:
    """🏅 Resolve a user's loyalty tier from lifetime points"""

    CACHE_KEY: ClassVar[str] = "loyalty:tiers"

    @staticmethod
    def resolve(total_points: int, tiers: Sequence[TierSnapshot]) -> TierStatus:
        """
        Resolve the active tier for a lifetime points total.

        The active tier is the last one (ascending by min_points) whose threshold
        does not exceed the total; totals below the lowest threshold get the lowest tier.
        """
        ladder = sorted(tiers or DEFAULT_TIERS, key=lambda t: t.min_points)
        total = max(0, int(total_points))

        index = 0
        for i, tier in enumerate(ladder):
            if tier.min_points <= total:
                index = i

        current = ladder[index]
        if index + 1 >= len(ladder):
            return TierStatus(current=current, next_tier=None, progress=100, points_to_next=0, is_max_tier=True)

        next_tier = ladder[index + 1]
        earned = max(0, total - current.min_points)
        needed = next_tier.min_points - current.min_points
        # Round half up, integer only
        progress = (2 * earned * PERCENT + needed) // (2 * needed)

        return TierStatus(
            current=current,
            next_tier=next_tier,
            progress=min(PERCENT, max(0, progress)),
            points_to_next=max(0, next_tier.min_points - total),
            is_max_tier=False,
        )

    @classmethod
    def get_tiers(cls) -> tuple[TierSnapshot, ...]:
        """Tier ladder from the database through the cache, default ladder when empty"""
        tiers = cache.get(cls.CACHE_KEY)
        if tiers is not None:
            return tiers  # type: ignore[no-any-return]

        tiers = tuple(TierSnapshot.from_model(t) for t in LoyaltyTier.objects.order_by("min_points"))
        if not tiers:
            logger.info("🏅 [Loyalty] No tiers configured, using default ladder")
            tiers = DEFAULT_TIERS

        timeout = SettingsService.get_integer_setting("loyalty.tier_cache_timeout", 3600)
        cache.set(cls.CACHE_KEY, tiers, timeout=timeout)
        return tiers

    @classmethod
    def invalidate(cls) -> None:
        cache.delete(cls.CACHE_KEY)
        logger.debug("🧹 [Loyalty] Tier cache invalidated")

    @classmethod
    def status_for(cls, user: User) -> TierStatus:
        return cls.resolve(user.total_points, cls.get_tiers())

    @classmethod
    def tier_for(cls, user: User) -> TierSnapshot:
        return cls.status_for(user).current


# ===============================================================================
# REWARD LEDGER
# ===============================================================================


class RewardLedger:
    """
    💰 Reward point movements.

    Every balance change is a single conditional UPDATE with F() expressions
    followed by an append-only LoyaltyTransaction row. Callers own the transaction.
    """

    @classmethod
    def _balance(cls, user_id: Any) -> int:
        return User.objects.values_list("points", flat=True).get(pk=user_id)  # type: ignore[no-any-return]

    @classmethod
    def credit(cls, user: User, points: Points, order: Order | None = None) -> Points:
        """Add points to both the spendable and lifetime balances"""
        if points <= 0:
            return 0

        updated = User.objects.filter(pk=user.pk).update(
            points=F("points") + points,
            total_points=F("total_points") + points,
        )
        if not updated:
            raise NotFound("User not found", user_id=user.pk)

        LoyaltyTransaction.objects.create(
            user_id=user.pk,
            transaction_type="earn",
            points=points,
            lifetime_points=points,
            balance_after=cls._balance(user.pk),
            order=order,
            description=f"Order {order.order_number}" if order else "",
        )
        logger.info(
            "💰 [Loyalty] Credited %d points to user %s",
            points,
            user.pk,
            extra={"user_id": user.pk, "points": points, "order_id": getattr(order, "pk", None)},
        )
        return points

    @classmethod
    def debit_for_redemption(cls, user: User, cost: Points, voucher_code: str = "") -> Points:
        """
        Spend points on a voucher redemption. Lifetime total is untouched.

        Raises:
            InsufficientPoints: balance below cost; nothing is changed
        """
        if cost <= 0:
            return 0

        updated = User.objects.filter(pk=user.pk, points__gte=cost).update(points=F("points") - cost)
        if not updated:
            raise InsufficientPoints(user_id=user.pk, required=cost)

        LoyaltyTransaction.objects.create(
            user_id=user.pk,
            transaction_type="redeem",
            points=-cost,
            lifetime_points=0,
            balance_after=cls._balance(user.pk),
            voucher_code=voucher_code,
            description=f"Redeemed voucher {voucher_code}".strip(),
        )
        logger.info(
            "🎟️ [Loyalty] Debited %d points from user %s for %s",
            cost,
            user.pk,
            voucher_code,
            extra={"user_id": user.pk, "points": cost, "voucher_code": voucher_code},
        )
        return cost

    @classmethod
    def reverse(cls, user_id: Any, points: Points, order: Order | None = None) -> Points:
        """Take back points granted by an order from both balances, floored at zero"""
        if points <= 0:
            return 0

        User.objects.filter(pk=user_id).update(
            points=Greatest(F("points") - points, Value(0), output_field=IntegerField()),
            total_points=Greatest(F("total_points") - points, Value(0), output_field=IntegerField()),
        )

        LoyaltyTransaction.objects.create(
            user_id=user_id,
            transaction_type="reverse",
            points=-points,
            lifetime_points=-points,
            balance_after=cls._balance(user_id),
            order=order,
            description=f"Order {order.order_number} cancelled" if order else "",
        )
        logger.info(
            "↩️ [Loyalty] Reversed %d points for user %s",
            points,
            user_id,
            extra={"user_id": user_id, "points": points, "order_id": getattr(order, "pk", None)},
        )
        return points
