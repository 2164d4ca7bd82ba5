"""
Tests for order placement, status workflow and cancellation.
"""

from unittest import mock

from django.test import TestCase

from apps.loyalty.models import LoyaltyTier, LoyaltyTransaction
from apps.orders.models import Order, OrderItem, OrderStatusHistory
from apps.orders.services import OrderLifecycleController, OrderQueryService
from apps.promotions.models import RedeemedVoucherInstance, VoucherDefinition, VoucherUsage
from apps.users.models import User
from tests.factories import (
    cart,
    checkout_data,
    create_default_tiers,
    create_instance,
    create_user,
    create_voucher,
)


class OrderPlacementTestCase(TestCase):
    """place(): pricing, persistence, points and voucher consumption"""

    def setUp(self):
        create_default_tiers()
        self.user = create_user(points=100, total_points=1200)  # Silver

    def test_place_order_without_voucher(self):
        result = OrderLifecycleController.place(self.user, cart((150000, 2, "shoes")), checkout_data())

        self.assertTrue(result.is_ok())
        order = result.unwrap()
        self.assertEqual(order.status, "pending")
        self.assertTrue(order.order_number.startswith("ORD-"))
        self.assertEqual(order.subtotal, 300000)
        self.assertEqual(order.shipping_fee, 0)
        self.assertEqual(order.tier_discount_amount, 15000)
        self.assertEqual(order.total, 285000)
        self.assertEqual(order.earned_points, 30)
        self.assertEqual(order.tier_slug, "silver")
        self.assertEqual(order.tier_discount_percent, 5)
        self.assertEqual(order.payment_status, "unpaid")

        item = OrderItem.objects.get(order=order)
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.line_total, 300000)

        history = OrderStatusHistory.objects.get(order=order)
        self.assertEqual(history.old_status, "")
        self.assertEqual(history.new_status, "pending")
        self.assertTrue(history.is_automatic)

        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 130)
        self.assertEqual(self.user.total_points, 1230)
        self.assertTrue(LoyaltyTransaction.objects.filter(order=order, transaction_type="earn", points=30).exists())

    def test_prepaid_order_marked_paid(self):
        result = OrderLifecycleController.place(
            self.user, cart((100000, 1, "")), checkout_data(payment_method="bank_transfer")
        )
        self.assertEqual(result.unwrap().payment_status, "paid")

    def test_empty_cart_rejected(self):
        result = OrderLifecycleController.place(self.user, [], checkout_data())

        self.assertTrue(result.is_err())
        self.assertFalse(Order.objects.exists())

    def test_subtotal_mismatch_rejected(self):
        result = OrderLifecycleController.place(self.user, cart((100000, 2, "")), checkout_data(subtotal=150000))

        self.assertTrue(result.is_err())
        self.assertEqual(result.unwrap_err().code, "PRICING_MISMATCH")
        self.assertFalse(Order.objects.exists())

    def test_matching_subtotal_accepted(self):
        result = OrderLifecycleController.place(self.user, cart((100000, 2, "")), checkout_data(subtotal=200000))
        self.assertTrue(result.is_ok())

    def test_public_voucher_counts_usage(self):
        voucher = create_voucher("SAVE20K", usage_limit=10)

        order = OrderLifecycleController.place(
            self.user, cart((400000, 1, "")), checkout_data(voucher_code="save20k")
        ).unwrap()

        self.assertEqual(order.voucher_code, "SAVE20K")
        self.assertEqual(order.voucher_source, "definition")
        self.assertEqual(order.voucher_discount_amount, 20000)
        self.assertEqual(order.total, 400000 - 20000 - 20000)
        voucher.refresh_from_db()
        self.assertEqual(voucher.used_count, 1)
        self.assertTrue(VoucherUsage.objects.filter(order=order, voucher_code="SAVE20K").exists())

    def test_redeemed_instance_consumed(self):
        definition = create_voucher("VIP", is_public=False, points_cost=100, type="percent", value=10)
        instance = create_instance(self.user, definition)

        order = OrderLifecycleController.place(
            self.user, cart((100000, 1, "")), checkout_data(voucher_code=instance.voucher_code)
        ).unwrap()

        self.assertEqual(order.voucher_source, "instance")
        self.assertEqual(order.voucher_discount_amount, 10000)
        instance.refresh_from_db()
        self.assertTrue(instance.is_used)

    def test_used_instance_cannot_be_applied_again(self):
        definition = create_voucher("VIP", is_public=False, points_cost=100)
        instance = create_instance(self.user, definition)
        OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data(voucher_code="VIP_ABC123"))

        result = OrderLifecycleController.place(
            self.user, cart((100000, 1, "")), checkout_data(voucher_code=instance.voucher_code)
        )
        self.assertEqual(result.unwrap_err().code, "NOT_FOUND")

    def test_invalid_voucher_rejects_whole_order(self):
        create_voucher("BIG", min_order=1000000)

        result = OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data(voucher_code="BIG"))

        self.assertEqual(result.unwrap_err().code, "MIN_ORDER_NOT_MET")
        self.assertFalse(Order.objects.exists())
        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 100)

    def test_usage_exhausted_at_commit_rolls_back_everything(self):
        voucher = create_voucher("LAST", usage_limit=1, used_count=1)

        # Validation passes, the guarded usage increment then fails inside the transaction
        with mock.patch.object(VoucherDefinition, "is_depleted", new_callable=mock.PropertyMock, return_value=False):
            result = OrderLifecycleController.place(
                self.user, cart((100000, 1, "")), checkout_data(voucher_code="LAST")
            )

        self.assertEqual(result.unwrap_err().code, "USAGE_EXHAUSTED")
        self.assertFalse(Order.objects.exists())
        self.assertFalse(LoyaltyTransaction.objects.exists())
        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 100)
        self.assertEqual(self.user.total_points, 1200)
        voucher.refresh_from_db()
        self.assertEqual(voucher.used_count, 1)

    def test_tier_snapshot_survives_tier_change(self):
        order = OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data()).unwrap()

        LoyaltyTier.objects.filter(slug="silver").update(discount_percent=50)
        order.refresh_from_db()
        self.assertEqual(order.tier_discount_percent, 5)

    def test_taken_order_number_is_regenerated(self):
        first = OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data()).unwrap()
        real_generate = Order.generate_order_number
        numbers = []

        # A concurrent placement computed the same number first
        def collide_once(order):
            if numbers:
                real_generate(order)
            else:
                order.order_number = first.order_number
            numbers.append(order.order_number)

        with mock.patch.object(Order, "generate_order_number", autospec=True, side_effect=collide_once):
            result = OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data())

        order = result.unwrap()
        self.assertEqual(len(numbers), 2)
        self.assertEqual(order.order_number, numbers[1])
        self.assertNotEqual(order.order_number, first.order_number)
        self.assertEqual(Order.objects.count(), 2)

    def test_order_number_never_free_returns_error(self):
        first = OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data()).unwrap()
        self.user.refresh_from_db()
        points_before = self.user.points

        def always_collide(order):
            order.order_number = first.order_number

        with mock.patch.object(Order, "generate_order_number", autospec=True, side_effect=always_collide):
            result = OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data())

        self.assertEqual(result.unwrap_err().code, "TRANSIENT_FAILURE")
        self.assertEqual(Order.objects.count(), 1)
        self.user.refresh_from_db()
        self.assertEqual(self.user.points, points_before)


class OrderPreviewTestCase(TestCase):
    def setUp(self):
        self.user = create_user()

    def test_preview_does_not_persist(self):
        create_voucher("SAVE20K")
        result = OrderLifecycleController.preview(self.user, cart((100000, 1, "")), "SAVE20K")

        data = result.unwrap()
        self.assertEqual(data["pricing"]["total"], 100000)
        self.assertEqual(data["voucher"]["code"], "SAVE20K")
        self.assertIsNone(data["voucher_error"])
        self.assertFalse(Order.objects.exists())

    def test_preview_reports_voucher_error(self):
        data = OrderLifecycleController.preview(self.user, cart((100000, 1, "")), "NOPE").unwrap()

        self.assertIsNone(data["voucher"])
        self.assertEqual(data["voucher_error"]["error_code"], "NOT_FOUND")
        self.assertEqual(data["pricing"]["voucher_discount"], 0)


class OrderTransitionTestCase(TestCase):
    """Status workflow gates"""

    def setUp(self):
        self.user = create_user()
        self.staff = create_user(email="staff@example.com", is_staff=True)
        self.order = OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data()).unwrap()

    def test_forward_transition_records_history(self):
        result = OrderLifecycleController.transition(self.order, "confirmed", changed_by=self.staff)

        self.assertEqual(result.unwrap().status, "confirmed")
        history = OrderStatusHistory.objects.filter(order=self.order).order_by("created_at").last()
        self.assertEqual(history.old_status, "pending")
        self.assertEqual(history.new_status, "confirmed")
        self.assertEqual(history.note, "Order confirmed")
        self.assertEqual(history.changed_by, self.staff)

    def test_full_workflow(self):
        for status in ("confirmed", "processing", "shipping", "delivered"):
            self.assertTrue(OrderLifecycleController.transition(self.order, status).is_ok())
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "delivered")

    def test_completed_alias(self):
        result = OrderLifecycleController.transition(self.order, "Completed")
        self.assertEqual(result.unwrap().status, "delivered")

    def test_backward_transition_rejected(self):
        OrderLifecycleController.transition(self.order, "shipping")

        result = OrderLifecycleController.transition(self.order, "confirmed")

        self.assertEqual(result.unwrap_err().code, "INVALID_TRANSITION")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "shipping")

    def test_unknown_status(self):
        result = OrderLifecycleController.transition(self.order, "teleported")
        self.assertEqual(result.unwrap_err().code, "INVALID_TRANSITION")

    def test_delivered_is_terminal(self):
        OrderLifecycleController.transition(self.order, "delivered")
        self.assertTrue(OrderLifecycleController.transition(self.order, "processing").is_err())

    def test_refund_only_after_cancellation(self):
        self.assertTrue(OrderLifecycleController.transition(self.order, "refunded").is_err())

        Order.objects.filter(pk=self.order.pk).update(payment_status="paid")
        OrderLifecycleController.transition(self.order, "cancelled")
        result = OrderLifecycleController.transition(self.order, "refunded")

        order = result.unwrap()
        self.assertEqual(order.status, "refunded")
        self.assertEqual(order.payment_status, "refunded")

    def test_stale_instance_uses_stored_status(self):
        stale = Order.objects.get(pk=self.order.pk)
        OrderLifecycleController.transition(self.order, "delivered")

        self.assertTrue(OrderLifecycleController.transition(stale, "shipping").is_err())


class OrderCancellationTestCase(TestCase):
    """Cancellation gives back points and vouchers exactly once"""

    def setUp(self):
        self.user = create_user(points=1000, total_points=3000)

    def place(self, voucher_code=None, amount=250000):
        return OrderLifecycleController.place(
            self.user, cart((amount, 1, "")), checkout_data(voucher_code=voucher_code)
        ).unwrap()

    def test_cancel_restores_points_exactly(self):
        order = self.place()
        self.assertEqual(order.earned_points, 25)

        result = OrderLifecycleController.cancel(order)

        order = result.unwrap()
        self.assertEqual(order.status, "cancelled")
        self.assertIsNotNone(order.cancelled_at)
        self.assertTrue(order.rewards_reversed)
        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 1000)
        self.assertEqual(self.user.total_points, 3000)

    def test_cancel_twice_is_idempotent(self):
        order = self.place()
        OrderLifecycleController.cancel(order)

        result = OrderLifecycleController.cancel(order)

        self.assertTrue(result.is_ok())
        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 1000)
        self.assertEqual(LoyaltyTransaction.objects.filter(order=order, transaction_type="reverse").count(), 1)
        self.assertEqual(OrderStatusHistory.objects.filter(order=order, new_status="cancelled").count(), 1)

    def test_cancel_via_transition(self):
        order = self.place()
        OrderLifecycleController.transition(order, "processing")

        result = OrderLifecycleController.transition(order, "cancelled")

        self.assertEqual(result.unwrap().status, "cancelled")
        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 1000)

    def test_cannot_cancel_delivered(self):
        order = self.place()
        OrderLifecycleController.transition(order, "delivered")

        result = OrderLifecycleController.cancel(order)

        self.assertEqual(result.unwrap_err().code, "INVALID_TRANSITION")
        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 1025)

    def test_cancel_restores_redeemed_instance(self):
        definition = create_voucher("VIP", is_public=False, points_cost=100)
        instance = create_instance(self.user, definition)
        order = self.place(voucher_code=instance.voucher_code)

        OrderLifecycleController.cancel(order)

        instance.refresh_from_db()
        self.assertFalse(instance.is_used)
        self.assertIsNone(instance.used_at)
        self.assertTrue(VoucherUsage.objects.get(order=order).is_reversed)

    def test_cancel_gives_back_public_usage(self):
        voucher = create_voucher("SAVE20K", usage_limit=1)
        order = self.place(voucher_code="SAVE20K")

        OrderLifecycleController.cancel(order)

        voucher.refresh_from_db()
        self.assertEqual(voucher.used_count, 0)
        self.assertTrue(self.place(voucher_code="SAVE20K").voucher_code)

    def test_cancel_with_purged_instance_still_reverses_points(self):
        definition = create_voucher("VIP", is_public=False, points_cost=100)
        instance = create_instance(self.user, definition)
        order = self.place(voucher_code=instance.voucher_code)
        RedeemedVoucherInstance.objects.filter(pk=instance.pk).delete()

        result = OrderLifecycleController.cancel(order)

        self.assertTrue(result.is_ok())
        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 1000)

    def test_reversal_floors_at_zero_after_spending(self):
        order = self.place()
        User.objects.filter(pk=self.user.pk).update(points=10)

        OrderLifecycleController.cancel(order)

        self.user.refresh_from_db()
        self.assertEqual(self.user.points, 0)
        self.assertEqual(self.user.total_points, 3000)


class CustomerCancellationTestCase(TestCase):
    def setUp(self):
        self.user = create_user()
        self.other = create_user(email="other@example.com")
        self.order = OrderLifecycleController.place(self.user, cart((100000, 1, "")), checkout_data()).unwrap()

    def test_owner_can_cancel_pending(self):
        result = OrderLifecycleController.cancel_by_customer(self.order.pk, self.user)

        self.assertEqual(result.unwrap().status, "cancelled")
        history = OrderStatusHistory.objects.get(order=self.order, new_status="cancelled")
        self.assertEqual(history.note, "Cancelled by customer")
        self.assertEqual(history.changed_by, self.user)

    def test_owner_can_cancel_confirmed(self):
        OrderLifecycleController.transition(self.order, "confirmed")
        result = OrderLifecycleController.cancel_by_customer(self.order.pk, self.user, "Changed my mind")
        self.assertTrue(result.is_ok())

    def test_other_user_gets_not_found(self):
        result = OrderLifecycleController.cancel_by_customer(self.order.pk, self.other)
        self.assertEqual(result.unwrap_err().code, "NOT_FOUND")

    def test_customer_cannot_cancel_once_processing(self):
        OrderLifecycleController.transition(self.order, "processing")

        result = OrderLifecycleController.cancel_by_customer(self.order.pk, self.user)

        self.assertEqual(result.unwrap_err().code, "INVALID_TRANSITION")

    def test_customer_cannot_cancel_order_shipped_after_check(self):
        real_cancel = OrderLifecycleController._cancel

        # Staff ship the order between the customer check and the cancel gate
        def ship_first(order, *args):
            Order.objects.filter(pk=order.pk).update(status="shipping")
            return real_cancel(order, *args)

        with mock.patch.object(OrderLifecycleController, "_cancel", side_effect=ship_first):
            result = OrderLifecycleController.cancel_by_customer(self.order.pk, self.user)

        self.assertEqual(result.unwrap_err().code, "INVALID_TRANSITION")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "shipping")
        self.assertFalse(self.order.rewards_reversed)

    def test_staff_can_still_cancel_shipping_order(self):
        OrderLifecycleController.transition(self.order, "shipping")
        self.assertEqual(OrderLifecycleController.cancel(self.order).unwrap().status, "cancelled")

    def test_customer_cancel_already_cancelled(self):
        OrderLifecycleController.cancel(self.order)
        self.assertTrue(OrderLifecycleController.cancel_by_customer(self.order.pk, self.user).is_ok())


class OrderQueryServiceTestCase(TestCase):
    def setUp(self):
        self.user = create_user()
        self.other = create_user(email="other@example.com")
        create_user(email="staff@example.com", is_staff=True)

    def place(self, user, amount):
        return OrderLifecycleController.place(user, cart((amount, 1, "")), checkout_data()).unwrap()

    def test_orders_for_user(self):
        mine = self.place(self.user, 100000)
        self.place(self.other, 100000)

        self.assertEqual(list(OrderQueryService.orders_for_user(self.user)), [mine])
        self.assertTrue(OrderQueryService.order_for_user(mine.pk, self.user).is_ok())
        self.assertTrue(OrderQueryService.order_for_user(mine.pk, self.other).is_err())

    def test_dashboard_stats(self):
        delivered = self.place(self.user, 400000)
        OrderLifecycleController.transition(delivered, "delivered")
        cancelled = self.place(self.user, 100000)
        OrderLifecycleController.cancel(cancelled)
        self.place(self.other, 100000)

        stats = OrderQueryService.dashboard_stats()

        self.assertEqual(stats["total_revenue"], 400000)
        self.assertEqual(stats["total_orders"], 3)
        self.assertEqual(stats["pending_orders"], 1)
        self.assertEqual(stats["cancelled_orders"], 1)
        self.assertEqual(stats["total_customers"], 2)

    def test_dashboard_stats_empty(self):
        stats = OrderQueryService.dashboard_stats()
        self.assertEqual(stats["total_revenue"], 0)
        self.assertEqual(stats["total_orders"], 0)
