"""
Tests for the staff back-office API.

Endpoints tested:
- /api/admin/tiers/ (CRUD)
- /api/admin/vouchers/ (CRUD)
- /api/admin/orders/ (list, filter, status override)
- /api/admin/customers/
- /api/admin/dashboard/
"""

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from apps.loyalty.models import LoyaltyTier
from apps.loyalty.services import TierResolver
from apps.orders.models import OrderStatusHistory
from apps.orders.services import OrderLifecycleController
from apps.promotions.models import VoucherDefinition
from tests.factories import cart, checkout_data, create_default_tiers, create_user, create_voucher


class BackofficeAPITestCase(TestCase):
    def setUp(self):
        self.staff = create_user(email="staff@example.com", is_staff=True)
        self.customer = create_user(email="customer@example.com", points=50, total_points=1500)
        self.client = APIClient()
        self.client.force_authenticate(user=self.staff)


class StaffOnlyAccessTests(BackofficeAPITestCase):
    def test_customer_forbidden(self):
        client = APIClient()
        client.force_authenticate(user=self.customer)

        for name in ("api:backoffice:tier-list", "api:backoffice:order-list", "api:backoffice:dashboard"):
            self.assertEqual(client.get(reverse(name)).status_code, 403)


class LoyaltyTierAPITests(BackofficeAPITestCase):
    def test_create_tier_refreshes_ladder(self):
        create_default_tiers()
        self.assertEqual(TierResolver.tier_for(self.customer).slug, "silver")

        response = self.client.post(
            reverse("api:backoffice:tier-list"),
            {"slug": "Platinum", "name": "Platinum", "min_points": 1200, "discount_percent": 7},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["slug"], "platinum")
        self.assertEqual(TierResolver.tier_for(self.customer).slug, "platinum")

    def test_invalid_discount_rejected(self):
        response = self.client.post(
            reverse("api:backoffice:tier-list"),
            {"slug": "broken", "name": "Broken", "min_points": 10, "discount_percent": 150},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(LoyaltyTier.objects.filter(slug="broken").exists())

    def test_list_ordered_by_threshold(self):
        create_default_tiers()
        response = self.client.get(reverse("api:backoffice:tier-list"))
        self.assertEqual([t["slug"] for t in response.data["results"]], ["bronze", "silver", "gold"])


class VoucherDefinitionAPITests(BackofficeAPITestCase):
    def test_create_voucher_normalizes_code(self):
        response = self.client.post(
            reverse("api:backoffice:voucher-list"),
            {"code": " summer10 ", "type": "percent", "value": 10, "max_discount": 30000},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["code"], "SUMMER10")
        self.assertEqual(response.data["used_count"], 0)

    def test_duplicate_code_rejected(self):
        create_voucher("SUMMER10")
        response = self.client.post(
            reverse("api:backoffice:voucher-list"), {"code": "summer10", "type": "fixed", "value": 1000}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("code", response.data)

    def test_model_rules_enforced(self):
        response = self.client.post(
            reverse("api:backoffice:voucher-list"),
            {"code": "PRIVATE", "type": "fixed", "value": 1000, "is_public": False, "points_cost": 0},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertFalse(VoucherDefinition.objects.filter(code="PRIVATE").exists())

    def test_update_and_search(self):
        voucher = create_voucher("SAVE20K", description="Twenty off")

        response = self.client.patch(
            reverse("api:backoffice:voucher-detail", args=[voucher.pk]), {"is_active": False}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        voucher.refresh_from_db()
        self.assertFalse(voucher.is_active)

        found = self.client.get(reverse("api:backoffice:voucher-list"), {"search": "twenty"})
        self.assertEqual(found.data["count"], 1)


class AdminOrderAPITests(BackofficeAPITestCase):
    def setUp(self):
        super().setUp()
        self.order = OrderLifecycleController.place(self.customer, cart((250000, 1, "")), checkout_data()).unwrap()

    def test_list_and_filter_by_alias(self):
        other = OrderLifecycleController.place(self.customer, cart((100000, 1, "")), checkout_data()).unwrap()
        OrderLifecycleController.transition(other, "delivered")

        response = self.client.get(reverse("api:backoffice:order-list"), {"status": "completed"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["order_number"], other.order_number)

    def test_filter_by_email(self):
        response = self.client.get(reverse("api:backoffice:order-list"), {"email": "customer@"})
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["customer_email"], "customer@example.com")

    def test_status_override(self):
        response = self.client.post(
            reverse("api:backoffice:order-update-status", args=[self.order.pk]),
            {"status": "shipping", "note": "Handed to courier"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "shipping")
        history = OrderStatusHistory.objects.get(order=self.order, new_status="shipping")
        self.assertEqual(history.note, "Handed to courier")
        self.assertEqual(history.changed_by, self.staff)

    def test_status_override_cancel_reverses_points(self):
        response = self.client.post(
            reverse("api:backoffice:order-update-status", args=[self.order.pk]), {"status": "cancelled"}, format="json"
        )

        self.assertEqual(response.status_code, 200)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.points, 50)
        self.assertEqual(self.customer.total_points, 1500)

    def test_illegal_override_conflicts(self):
        OrderLifecycleController.transition(self.order, "delivered")

        response = self.client.post(
            reverse("api:backoffice:order-update-status", args=[self.order.pk]), {"status": "pending"}, format="json"
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error_code"], "INVALID_TRANSITION")

    def test_unknown_status_rejected(self):
        response = self.client.post(
            reverse("api:backoffice:order-update-status", args=[self.order.pk]), {"status": "lost"}, format="json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error_code"], "INVALID_INPUT")


class CustomerAPITests(BackofficeAPITestCase):
    def test_customers_with_tier_and_order_count(self):
        create_default_tiers()
        OrderLifecycleController.place(self.customer, cart((100000, 1, "")), checkout_data())

        response = self.client.get(reverse("api:backoffice:customer-list"))

        self.assertEqual(response.data["count"], 1)
        row = response.data["results"][0]
        self.assertEqual(row["email"], "customer@example.com")
        self.assertEqual(row["tier"]["slug"], "silver")
        self.assertEqual(row["order_count"], 1)


class DashboardAPITests(BackofficeAPITestCase):
    def test_dashboard(self):
        order = OrderLifecycleController.place(self.customer, cart((400000, 1, "")), checkout_data()).unwrap()
        OrderLifecycleController.transition(order, "delivered")
        OrderLifecycleController.place(self.customer, cart((100000, 1, "")), checkout_data())

        response = self.client.get(reverse("api:backoffice:dashboard"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_orders"], 2)
        self.assertEqual(response.data["pending_orders"], 1)
        self.assertEqual(response.data["total_customers"], 1)
        self.assertEqual(response.data["total_revenue"], order.total)
