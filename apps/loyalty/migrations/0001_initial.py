# Generated manually for Loyalty App - tier ladder and reward ledger

import uuid

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # LoyaltyTier model
        migrations.CreateModel(
            name="LoyaltyTier",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("slug", models.SlugField(unique=True)),
                ("name", models.CharField(max_length=100)),
                ("description", models.TextField(blank=True)),
                (
                    "min_points",
                    models.PositiveIntegerField(help_text="Minimum lifetime points to reach this tier", unique=True),
                ),
                (
                    "discount_percent",
                    models.PositiveSmallIntegerField(
                        default=0,
                        help_text="Automatic discount on the order subtotal (0-100)",
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                (
                    "free_shipping_threshold",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Overrides the store free-shipping threshold (empty = no override, 0 = always free)",
                        null=True,
                    ),
                ),
                (
                    "benefits",
                    models.JSONField(
                        blank=True, default=list, help_text="Ordered list of benefit descriptions shown to customers"
                    ),
                ),
                ("icon", models.CharField(blank=True, max_length=16)),
                ("badge_color", models.CharField(default="gray", max_length=20)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Loyalty Tier",
                "verbose_name_plural": "Loyalty Tiers",
                "db_table": "loyalty_tiers",
                "ordering": ["min_points"],
            },
        ),
        # LoyaltyTransaction model
        migrations.CreateModel(
            name="LoyaltyTransaction",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("earn", "Points Earned"),
                            ("redeem", "Points Redeemed"),
                            ("reverse", "Order Cancelled"),
                        ],
                        max_length=20,
                    ),
                ),
                ("points", models.IntegerField(help_text="Spendable balance change")),
                ("lifetime_points", models.IntegerField(default=0, help_text="Lifetime total change")),
                ("balance_after", models.PositiveIntegerField(help_text="Spendable balance after transaction")),
                ("voucher_code", models.CharField(blank=True, max_length=80)),
                ("description", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="loyalty_transactions",
                        to="orders.order",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="loyalty_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Loyalty Transaction",
                "verbose_name_plural": "Loyalty Transactions",
                "db_table": "loyalty_transactions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="idx_loyalty_tx_user"),
                    models.Index(fields=["transaction_type", "-created_at"], name="idx_loyalty_tx_type"),
                ],
            },
        ),
    ]
