"""
User admin for the storefront checkout platform.
"""

from typing import ClassVar

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Email-based user admin with reward balances"""

    ordering: ClassVar = ["email"]
    list_display: ClassVar = ["email", "first_name", "last_name", "points", "total_points", "is_staff"]
    search_fields: ClassVar = ["email", "first_name", "last_name", "phone"]
    # Balances change through the reward ledger only
    readonly_fields: ClassVar = ["points", "total_points", "created_at", "updated_at", "last_login", "date_joined"]

    fieldsets = (
        (None, {"fields": ("email", "password")}),
        (_("Personal info"), {"fields": ("first_name", "last_name", "phone", "address")}),
        (_("Loyalty"), {"fields": ("points", "total_points")}),
        (_("Permissions"), {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        (_("Important dates"), {"fields": ("last_login", "date_joined", "created_at", "updated_at")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "password1", "password2")}),
    )
