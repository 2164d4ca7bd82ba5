"""
Django management command to register voucher housekeeping schedules with Django-Q2
"""

from typing import Any

from django.core.management.base import BaseCommand

from apps.promotions.tasks import setup_voucher_scheduled_tasks


class Command(BaseCommand):
    """⏰ Register voucher scheduled tasks"""

    help = "Register the expired voucher purge schedule"

    def handle(self, *args: Any, **options: Any) -> None:
        results = setup_voucher_scheduled_tasks()
        for task, status in results.items():
            self.stdout.write(f"  ⏰ {task}: {status}")
        self.stdout.write(self.style.SUCCESS("🎉 Voucher schedules ready"))
