"""
Django management command to install the default loyalty tier ladder
Creates the tiers defined in apps.loyalty.services.DEFAULT_TIERS
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandParser
from django.db import transaction

from apps.loyalty.models import LoyaltyTier
from apps.loyalty.services import DEFAULT_TIERS, TierResolver


class Command(BaseCommand):
    """🏅 Seed the default loyalty tiers"""

    help = "Install the default Bronze/Silver/Gold/Diamond loyalty tier ladder"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--force",
            action="store_true",
            help="Overwrite existing tiers with the default values",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        force = options.get("force", False)

        self.stdout.write(self.style.SUCCESS("🚀 Seeding loyalty tiers..."))

        created_count = 0
        updated_count = 0
        skipped_count = 0

        with transaction.atomic():
            for sort_order, tier in enumerate(DEFAULT_TIERS):
                values = {
                    "name": tier.name,
                    "min_points": tier.min_points,
                    "discount_percent": tier.discount_percent,
                    "free_shipping_threshold": tier.free_shipping_threshold,
                    "icon": tier.icon,
                    "badge_color": tier.badge_color,
                    "benefits": list(tier.benefits),
                    "sort_order": sort_order,
                }
                existing = LoyaltyTier.objects.filter(slug=tier.slug).first()

                if existing is None:
                    LoyaltyTier.objects.create(slug=tier.slug, **values)
                    created_count += 1
                    self.stdout.write(f"  ✅ Created tier: {tier.icon} {tier.name} ({tier.min_points}+)")
                elif force:
                    for field_name, value in values.items():
                        setattr(existing, field_name, value)
                    existing.save()
                    updated_count += 1
                    self.stdout.write(f"  🔄 Updated tier: {tier.icon} {tier.name}")
                else:
                    skipped_count += 1
                    self.stdout.write(f"  ⏭️  Skipped existing tier: {tier.slug}")

        TierResolver.invalidate()

        self.stdout.write(
            self.style.SUCCESS(
                f"🎉 Done: {created_count} created, {updated_count} updated, {skipped_count} skipped"
            )
        )
