"""
Django management command to set up default system settings
Creates all default settings defined in SettingsService.DEFAULT_SETTINGS
"""

from typing import Any

from django.core.management.base import BaseCommand, CommandParser

from apps.settings.models import SystemSetting
from apps.settings.services import SettingsService


class Command(BaseCommand):
    """⚙️ Set up default store settings"""

    help = "Set up default checkout and loyalty settings"

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--force",
            action="store_true",
            help="Force update existing settings to default values",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        force = options.get("force", False)

        self.stdout.write(self.style.SUCCESS("🚀 Setting up default system settings..."))

        created_count = 0
        updated_count = 0

        for key, default_value in SettingsService.DEFAULT_SETTINGS.items():
            setting, created = SystemSetting.objects.get_or_create(
                key=key,
                defaults={
                    "name": SettingsService._generate_name_from_key(key),
                    "category": key.split(".", 1)[0],
                    "data_type": SettingsService._infer_data_type(default_value),
                    "value": default_value,
                    "default_value": default_value,
                },
            )

            if created:
                created_count += 1
                self.stdout.write(f"  ✅ Created setting: {key} = {default_value}")
            elif force:
                setting.value = default_value
                setting.default_value = default_value
                setting.save(update_fields=["value", "default_value", "updated_at"])
                updated_count += 1
                self.stdout.write(f"  🔄 Updated setting: {key} = {default_value}")

        self.stdout.write(self.style.SUCCESS(f"🎉 Done: {created_count} created, {updated_count} updated"))
