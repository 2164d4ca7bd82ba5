"""
System Settings admin for the storefront checkout platform.
"""

from typing import ClassVar

from django.contrib import admin

from .models import SystemSetting


@admin.register(SystemSetting)
class SystemSettingAdmin(admin.ModelAdmin):
    list_display: ClassVar = ["key", "category", "data_type", "value", "is_active", "updated_at"]
    list_filter: ClassVar = ["category", "data_type", "is_active"]
    search_fields: ClassVar = ["key", "name", "description"]
    readonly_fields: ClassVar = ["created_at", "updated_at"]
