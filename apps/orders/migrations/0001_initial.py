# Generated manually for Orders App - orders with pricing, tier snapshot and tracking history

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        # Order model
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "order_number",
                    models.CharField(help_text="Human-readable order number", max_length=50, unique=True),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("confirmed", "Confirmed"),
                            ("processing", "Processing"),
                            ("shipping", "Shipping"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("subtotal", models.PositiveBigIntegerField(default=0)),
                ("shipping_fee", models.PositiveBigIntegerField(default=0)),
                ("tier_discount_amount", models.PositiveBigIntegerField(default=0)),
                ("voucher_discount_amount", models.PositiveBigIntegerField(default=0)),
                ("total", models.PositiveBigIntegerField(default=0)),
                ("earned_points", models.PositiveIntegerField(default=0, help_text="Points granted at placement")),
                ("voucher_code", models.CharField(blank=True, db_index=True, max_length=80)),
                (
                    "voucher_source",
                    models.CharField(
                        blank=True,
                        choices=[("", "None"), ("definition", "Voucher"), ("instance", "Redeemed Voucher")],
                        default="",
                        max_length=20,
                    ),
                ),
                ("tier_slug", models.CharField(blank=True, max_length=50)),
                ("tier_name", models.CharField(blank=True, max_length=100)),
                ("tier_discount_percent", models.PositiveSmallIntegerField(default=0)),
                ("full_name", models.CharField(blank=True, max_length=200)),
                ("phone", models.CharField(blank=True, max_length=20)),
                ("address", models.TextField(blank=True)),
                ("note", models.TextField(blank=True)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[("cod", "Cash on Delivery"), ("bank_transfer", "Bank Transfer"), ("card", "Card")],
                        default="cod",
                        max_length=20,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("unpaid", "Unpaid"), ("paid", "Paid"), ("refunded", "Refunded")],
                        default="unpaid",
                        max_length=20,
                    ),
                ),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                (
                    "rewards_reversed",
                    models.BooleanField(default=False, help_text="Set once when points and voucher were given back"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Order",
                "verbose_name_plural": "Orders",
                "db_table": "orders",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "-created_at"], name="idx_order_user_created"),
                    models.Index(fields=["status", "-created_at"], name="idx_order_status_created"),
                ],
            },
        ),
        # OrderItem model
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("product_id", models.CharField(help_text="Catalog product identifier", max_length=64)),
                ("product_name", models.CharField(max_length=255)),
                ("category", models.CharField(blank=True, max_length=100)),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("unit_price", models.PositiveBigIntegerField(help_text="Unit price at time of purchase")),
                ("line_total", models.PositiveBigIntegerField(default=0)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Order Item",
                "verbose_name_plural": "Order Items",
                "db_table": "order_items",
            },
        ),
        # OrderStatusHistory model
        migrations.CreateModel(
            name="OrderStatusHistory",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("old_status", models.CharField(blank=True, help_text="Previous status", max_length=20)),
                ("new_status", models.CharField(help_text="New status", max_length=20)),
                ("note", models.CharField(blank=True, max_length=255)),
                (
                    "is_automatic",
                    models.BooleanField(default=False, help_text="Whether this was an automatic system change"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="User who made the change",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="status_history",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "verbose_name": "Order Status History",
                "verbose_name_plural": "Order Status Histories",
                "db_table": "order_status_history",
                "ordering": ["created_at"],
                "indexes": [models.Index(fields=["order", "created_at"], name="idx_status_history_order")],
            },
        ),
    ]
