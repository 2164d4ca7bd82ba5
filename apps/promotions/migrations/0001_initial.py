# Generated manually for Promotions App - vouchers, redeemed instances and usage history

import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

VOUCHER_TYPES = [("fixed", "Fixed Amount"), ("percent", "Percentage"), ("freeship", "Free Shipping")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # VoucherDefinition model
        migrations.CreateModel(
            name="VoucherDefinition",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "code",
                    models.CharField(help_text="Unique voucher code, stored upper-case", max_length=50, unique=True),
                ),
                ("description", models.TextField(blank=True, help_text="Description shown to customers")),
                ("icon", models.CharField(blank=True, max_length=16)),
                ("type", models.CharField(choices=VOUCHER_TYPES, default="fixed", max_length=20)),
                (
                    "value",
                    models.PositiveIntegerField(help_text="Amount off (fixed/freeship) or percentage (percent)"),
                ),
                (
                    "max_discount",
                    models.PositiveIntegerField(
                        blank=True, help_text="Cap on the discount amount (percent vouchers only)", null=True
                    ),
                ),
                (
                    "min_order",
                    models.PositiveIntegerField(blank=True, help_text="Minimum order subtotal to qualify", null=True),
                ),
                (
                    "target_category",
                    models.CharField(
                        blank=True,
                        help_text="Only valid when every cart item belongs to this category",
                        max_length=100,
                    ),
                ),
                (
                    "valid_from",
                    models.DateTimeField(blank=True, help_text="When voucher becomes valid", null=True),
                ),
                (
                    "valid_until",
                    models.DateTimeField(blank=True, help_text="When voucher expires (null = never)", null=True),
                ),
                (
                    "usage_limit",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Maximum total uses across all customers (null = unlimited)",
                        null=True,
                    ),
                ),
                ("used_count", models.PositiveIntegerField(default=0, help_text="Current total use count")),
                (
                    "is_public",
                    models.BooleanField(default=True, help_text="Shown on the storefront and applicable by code"),
                ),
                (
                    "points_cost",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Reward points needed to redeem a private voucher",
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("is_active", models.BooleanField(default=True, help_text="Master switch")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "target_user",
                    models.ForeignKey(
                        blank=True,
                        help_text="Restrict this voucher to a single customer",
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="targeted_vouchers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Voucher",
                "verbose_name_plural": "Vouchers",
                "db_table": "promotion_vouchers",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_active", "is_public"], name="idx_voucher_visibility"),
                    models.Index(fields=["valid_from", "valid_until"], name="idx_voucher_validity"),
                ],
            },
        ),
        # RedeemedVoucherInstance model
        migrations.CreateModel(
            name="RedeemedVoucherInstance",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "voucher_code",
                    models.CharField(help_text="CODE_SUFFIX, unique per instance", max_length=80, unique=True),
                ),
                ("original_code", models.CharField(db_index=True, max_length=50)),
                ("type", models.CharField(choices=VOUCHER_TYPES, max_length=20)),
                ("value", models.PositiveIntegerField()),
                ("max_discount", models.PositiveIntegerField(blank=True, null=True)),
                ("min_order", models.PositiveIntegerField(blank=True, null=True)),
                ("target_category", models.CharField(blank=True, max_length=100)),
                ("valid_until", models.DateTimeField(blank=True, null=True)),
                ("description", models.TextField(blank=True)),
                ("icon", models.CharField(blank=True, max_length=16)),
                ("points_spent", models.PositiveIntegerField(default=0)),
                ("is_used", models.BooleanField(default=False)),
                ("used_at", models.DateTimeField(blank=True, null=True)),
                ("redeemed_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "definition",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="instances",
                        to="promotions.voucherdefinition",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="voucher_instances",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Redeemed Voucher",
                "verbose_name_plural": "Redeemed Vouchers",
                "db_table": "promotion_redeemed_vouchers",
                "ordering": ["-redeemed_at"],
                "indexes": [
                    models.Index(fields=["user", "is_used"], name="idx_redeemed_user_used"),
                    models.Index(fields=["valid_until"], name="idx_redeemed_valid_until"),
                ],
            },
        ),
        # VoucherUsage model
        migrations.CreateModel(
            name="VoucherUsage",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("voucher_code", models.CharField(db_index=True, max_length=80)),
                (
                    "source",
                    models.CharField(
                        choices=[("definition", "Voucher"), ("instance", "Redeemed Voucher")], max_length=20
                    ),
                ),
                ("discount_amount", models.PositiveIntegerField(default=0)),
                ("is_reversed", models.BooleanField(default=False)),
                ("reversed_at", models.DateTimeField(blank=True, null=True)),
                ("used_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="voucher_usages",
                        to="orders.order",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="voucher_usages",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Voucher Usage",
                "verbose_name_plural": "Voucher Usages",
                "db_table": "promotion_voucher_usages",
                "ordering": ["-used_at"],
                "indexes": [models.Index(fields=["user", "-used_at"], name="idx_voucher_usage_user")],
            },
        ),
    ]
