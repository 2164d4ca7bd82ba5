"""
Tests for voucher eligibility checks.
"""

from django.test import TestCase

from apps.promotions.services import FixedVoucher, FreeshipVoucher, PercentVoucher, VoucherValidator
from tests.factories import cart, create_instance, create_user, create_voucher, days_from_now


class VoucherValidatorTestCase(TestCase):
    """Resolution and rule checks for public codes"""

    def setUp(self):
        self.user = create_user()
        self.other = create_user(email="other@example.com")
        self.items = cart((150000, 2, "shoes"))
        self.subtotal = 300000

    def validate(self, code, user=None, items=None, subtotal=None):
        return VoucherValidator.validate(
            code,
            user or self.user,
            self.items if items is None else items,
            self.subtotal if subtotal is None else subtotal,
        )

    def test_valid_fixed_voucher(self):
        voucher = create_voucher("SAVE20K", type="fixed", value=20000)
        result = self.validate("save20k ")

        self.assertTrue(result.is_valid)
        self.assertIsInstance(result.voucher, FixedVoucher)
        self.assertEqual(result.voucher.code, "SAVE20K")
        self.assertEqual(result.voucher.source, "definition")
        self.assertEqual(result.voucher.record_id, voucher.pk)

    def test_typed_terms(self):
        create_voucher("HALF", type="percent", value=50, max_discount=10000)
        create_voucher("SHIPFREE", type="freeship", value=30000)

        percent = self.validate("HALF").voucher
        self.assertIsInstance(percent, PercentVoucher)
        self.assertEqual(percent.max_discount, 10000)
        self.assertIsInstance(self.validate("SHIPFREE").voucher, FreeshipVoucher)

    def test_empty_code(self):
        result = self.validate("   ")
        self.assertFalse(result.is_valid)
        self.assertEqual(result.error_code, "NOT_FOUND")

    def test_unknown_code(self):
        self.assertEqual(self.validate("NOPE").error_code, "NOT_FOUND")

    def test_inactive_voucher_not_found(self):
        create_voucher("OFF", is_active=False)
        self.assertEqual(self.validate("OFF").error_code, "NOT_FOUND")

    def test_private_voucher_not_applicable_by_code(self):
        create_voucher("VIP", is_public=False, points_cost=100)
        self.assertEqual(self.validate("VIP").error_code, "NOT_FOUND")

    def test_expired(self):
        create_voucher("OLD", valid_until=days_from_now(-1))
        result = self.validate("OLD")
        self.assertEqual(result.error_code, "EXPIRED")
        self.assertTrue(result.error_message)

    def test_not_yet_valid(self):
        create_voucher("SOON", valid_from=days_from_now(2))
        self.assertEqual(self.validate("SOON").error_code, "EXPIRED")

    def test_usage_exhausted(self):
        create_voucher("LIMITED", usage_limit=5, used_count=5)
        self.assertEqual(self.validate("LIMITED").error_code, "USAGE_EXHAUSTED")

    def test_min_order_not_met(self):
        create_voucher("BIG", min_order=500000)
        result = self.validate("BIG")
        self.assertEqual(result.error_code, "MIN_ORDER_NOT_MET")
        self.assertEqual(result.error.context["min_order"], 500000)

    def test_min_order_met_exactly(self):
        create_voucher("EXACT", min_order=300000)
        self.assertTrue(self.validate("EXACT").is_valid)

    def test_category_mismatch_with_mixed_cart(self):
        create_voucher("SHOES10", target_category="shoes")
        mixed = cart((100000, 1, "shoes"), (200000, 1, "bags"))
        self.assertEqual(self.validate("SHOES10", items=mixed).error_code, "CATEGORY_MISMATCH")

    def test_category_match(self):
        create_voucher("SHOES10", target_category="shoes")
        self.assertTrue(self.validate("SHOES10").is_valid)

    def test_not_yours(self):
        create_voucher("JUSTYOU", target_user=self.other)
        self.assertEqual(self.validate("JUSTYOU").error_code, "NOT_YOURS")
        self.assertTrue(self.validate("JUSTYOU", user=self.other).is_valid)

    def test_first_failing_check_wins(self):
        # Expired and below minimum: expiry is checked first
        create_voucher("BOTH", valid_until=days_from_now(-1), min_order=900000, usage_limit=1, used_count=1)
        self.assertEqual(self.validate("BOTH").error_code, "EXPIRED")

    def test_usage_checked_before_min_order(self):
        create_voucher("ORDERED", usage_limit=1, used_count=1, min_order=900000)
        self.assertEqual(self.validate("ORDERED").error_code, "USAGE_EXHAUSTED")


class RedeemedInstanceValidationTestCase(TestCase):
    """Codes with a suffix resolve only to the caller's unused instances"""

    def setUp(self):
        self.user = create_user()
        self.other = create_user(email="other@example.com")
        self.definition = create_voucher("VIP", is_public=False, points_cost=100, type="percent", value=10)
        self.instance = create_instance(self.user, self.definition)
        self.items = cart((100000, 1, ""))

    def test_owner_can_use_instance(self):
        result = VoucherValidator.validate("vip_abc123", self.user, self.items, 100000)

        self.assertTrue(result.is_valid)
        self.assertEqual(result.voucher.source, "instance")
        self.assertEqual(result.voucher.code, "VIP_ABC123")
        self.assertEqual(result.voucher.record_id, self.instance.pk)

    def test_other_user_gets_not_found(self):
        result = VoucherValidator.validate("VIP_ABC123", self.other, self.items, 100000)
        self.assertEqual(result.error_code, "NOT_FOUND")

    def test_used_instance_not_found(self):
        self.instance.is_used = True
        self.instance.save()
        self.assertEqual(VoucherValidator.validate("VIP_ABC123", self.user, self.items, 100000).error_code, "NOT_FOUND")

    def test_expired_instance(self):
        self.instance.valid_until = days_from_now(-1)
        self.instance.save()
        self.assertEqual(VoucherValidator.validate("VIP_ABC123", self.user, self.items, 100000).error_code, "EXPIRED")

    def test_instance_survives_definition_deactivation(self):
        self.definition.is_active = False
        self.definition.save()
        self.assertTrue(VoucherValidator.validate("VIP_ABC123", self.user, self.items, 100000).is_valid)

    def test_instance_ignores_definition_usage_limit(self):
        self.definition.usage_limit = 1
        self.definition.used_count = 1
        self.definition.save()
        self.assertTrue(VoucherValidator.validate("VIP_ABC123", self.user, self.items, 100000).is_valid)


class VoucherListingTestCase(TestCase):
    def setUp(self):
        self.user = create_user()

    def test_public_listing_excludes_private_inactive_and_expired(self):
        create_voucher("PUBLIC1")
        create_voucher("PRIVATE1", is_public=False, points_cost=100)
        create_voucher("INACTIVE1", is_active=False)
        create_voucher("EXPIRED1", valid_until=days_from_now(-1))

        codes = list(VoucherValidator.public_vouchers().values_list("code", flat=True))
        self.assertEqual(codes, ["PUBLIC1"])

    def test_redeemable_listing(self):
        create_voucher("PUBLIC1")
        create_voucher("CHEAP", is_public=False, points_cost=50)
        create_voucher("PRICEY", is_public=False, points_cost=500)

        codes = list(VoucherValidator.redeemable_vouchers().values_list("code", flat=True))
        self.assertEqual(codes, ["CHEAP", "PRICEY"])

    def test_available_for_user(self):
        definition = create_voucher("VIP", is_public=False, points_cost=100)
        create_instance(self.user, definition, voucher_code="VIP_AAAAAA")
        create_instance(self.user, definition, voucher_code="VIP_BBBBBB", is_used=True)
        create_instance(self.user, definition, voucher_code="VIP_CCCCCC", valid_until=days_from_now(-1))

        codes = list(VoucherValidator.available_for_user(self.user).values_list("voucher_code", flat=True))
        self.assertEqual(codes, ["VIP_AAAAAA"])
