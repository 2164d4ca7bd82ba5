# ===============================================================================
# API THROTTLING CLASSES 🚦
# ===============================================================================

from typing import Any

from django.conf import settings
from rest_framework.request import Request
from rest_framework.throttling import UserRateThrottle


class CheckoutScopedThrottle(UserRateThrottle):
    """Per-user rate limit keyed by ``scope`` in DEFAULT_THROTTLE_RATES, off when TESTING is set"""

    def allow_request(self, request: Request, view: Any) -> bool:
        if getattr(settings, "TESTING", False):
            return True
        return super().allow_request(request, view)


class CheckoutPreviewThrottle(CheckoutScopedThrottle):
    """Live pricing preview (cheap, called on every cart change)"""

    scope = "checkout_preview"


class CheckoutPlaceThrottle(CheckoutScopedThrottle):
    """Order placement (expensive, writes rewards)"""

    scope = "checkout_place"


class VoucherApplyThrottle(CheckoutScopedThrottle):
    """Brute-force protection on voucher codes"""

    scope = "voucher_apply"


class VoucherRedeemThrottle(CheckoutScopedThrottle):
    """Points exchange"""

    scope = "voucher_redeem"


class AdminAPIThrottle(CheckoutScopedThrottle):
    scope = "admin_api"
