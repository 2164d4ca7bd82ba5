"""
Checkout API URLs for the storefront platform.
Authenticated endpoints for pricing, vouchers, loyalty and customer orders.
"""

from django.urls import path

from . import views

app_name = "checkout"

urlpatterns = [
    # Voucher selection for the session cart
    path("voucher/apply/", views.voucher_apply, name="voucher_apply"),
    path("voucher/clear/", views.voucher_clear, name="voucher_clear"),
    # Live pricing
    path("preview/", views.checkout_preview, name="preview"),
    # Orders
    path("orders/", views.orders, name="orders"),
    path("orders/<uuid:order_id>/", views.order_detail, name="order_detail"),
    path("orders/<uuid:order_id>/cancel/", views.order_cancel, name="order_cancel"),
    # Loyalty
    path("loyalty/", views.loyalty_status, name="loyalty"),
    # Voucher listings and points redemption
    path("vouchers/public/", views.vouchers_public, name="vouchers_public"),
    path("vouchers/redeemable/", views.vouchers_redeemable, name="vouchers_redeemable"),
    path("vouchers/mine/", views.vouchers_mine, name="vouchers_mine"),
    path("vouchers/redeem/", views.vouchers_redeem, name="vouchers_redeem"),
]
