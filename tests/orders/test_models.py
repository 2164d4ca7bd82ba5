"""
Tests for order model helpers.
"""

import re

from django.test import TestCase

from apps.orders.models import Order, OrderItem, OrderStatusHistory
from tests.factories import create_user


class OrderModelTestCase(TestCase):
    def setUp(self):
        self.user = create_user()

    def test_order_number_format_and_sequence(self):
        first = Order.objects.create(user=self.user)
        second = Order.objects.create(user=self.user)

        self.assertRegex(first.order_number, r"^ORD-\d{8}-\d{6}$")
        first_seq = int(re.search(r"(\d{6})$", first.order_number).group(1))
        second_seq = int(re.search(r"(\d{6})$", second.order_number).group(1))
        self.assertEqual(second_seq, first_seq + 1)

    def test_item_line_total_computed_on_save(self):
        order = Order.objects.create(user=self.user)
        item = OrderItem.objects.create(order=order, product_id="p1", product_name="Hat", quantity=3, unit_price=50000)
        self.assertEqual(item.line_total, 150000)

    def test_customer_cancellable_statuses(self):
        order = Order(user=self.user, status="confirmed")
        self.assertTrue(order.can_be_cancelled)
        order.status = "processing"
        self.assertFalse(order.can_be_cancelled)

    def test_total_discount(self):
        order = Order(tier_discount_amount=15000, voucher_discount_amount=20000)
        self.assertEqual(order.total_discount, 35000)

    def test_default_history_note(self):
        self.assertEqual(OrderStatusHistory.default_note("shipping"), "Out for delivery")
        self.assertEqual(OrderStatusHistory.default_note("unknown"), "Status: unknown")


class OrderStatusRulesTestCase(TestCase):
    def test_normalize_status(self):
        self.assertEqual(Order.normalize_status(" Shipping "), "shipping")
        self.assertEqual(Order.normalize_status("Completed"), "delivered")
        self.assertIsNone(Order.normalize_status("lost"))
        self.assertIsNone(Order.normalize_status(None))

    def test_allowed_transitions(self):
        self.assertTrue(Order.is_allowed_transition("pending", "delivered"))
        self.assertTrue(Order.is_allowed_transition("shipping", "cancelled"))
        self.assertTrue(Order.is_allowed_transition("cancelled", "refunded"))
        self.assertFalse(Order.is_allowed_transition("shipping", "processing"))
        self.assertFalse(Order.is_allowed_transition("delivered", "cancelled"))
        self.assertFalse(Order.is_allowed_transition("refunded", "pending"))
        self.assertFalse(Order.is_allowed_transition("pending", "refunded"))
