"""
URL configuration for the storefront checkout platform.
"""

from django.contrib import admin
from django.urls import include, path

# ===============================================================================
# MAIN URL PATTERNS
# ===============================================================================

urlpatterns = [
    # Django admin
    path("admin/", admin.site.urls),
    # Centralized API (checkout + staff surfaces)
    path("api/", include("apps.api.urls")),
]
