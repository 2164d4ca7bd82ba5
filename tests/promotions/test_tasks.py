"""
Tests for voucher housekeeping tasks and their schedule.
"""

from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django_q.models import Schedule

from apps.promotions.models import RedeemedVoucherInstance
from apps.promotions.tasks import PURGE_SCHEDULE_NAME, purge_expired_vouchers, setup_voucher_scheduled_tasks
from tests.factories import create_instance, create_user, create_voucher, days_from_now


class PurgeExpiredVouchersTaskTestCase(TestCase):
    def test_task_reports_deleted_count(self):
        user = create_user()
        definition = create_voucher("VIP", is_public=False, points_cost=100)
        create_instance(user, definition, valid_until=days_from_now(-2))

        result = purge_expired_vouchers()

        self.assertEqual(result, {"success": True, "deleted": 1})
        self.assertFalse(RedeemedVoucherInstance.objects.exists())


class VoucherScheduleSetupTestCase(TestCase):
    def test_schedule_created_once(self):
        self.assertEqual(setup_voucher_scheduled_tasks(), {"purge_expired": "created"})
        self.assertEqual(setup_voucher_scheduled_tasks(), {"purge_expired": "already_exists"})

        schedule = Schedule.objects.get(name=PURGE_SCHEDULE_NAME)
        self.assertEqual(schedule.func, "apps.promotions.tasks.purge_expired_vouchers")
        self.assertEqual(schedule.schedule_type, Schedule.CRON)
        self.assertEqual(schedule.cron, "0 3 * * *")

    def test_management_command(self):
        out = StringIO()
        call_command("setup_voucher_tasks", stdout=out)

        self.assertIn("purge_expired: created", out.getvalue())
        self.assertEqual(Schedule.objects.filter(name=PURGE_SCHEDULE_NAME).count(), 1)
