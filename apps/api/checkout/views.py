"""
Checkout API Views for the storefront platform.
DRF views for pricing preview, voucher selection, loyalty status and customer orders.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api.core.errors import business_error_response, invalid_input_response
from apps.api.core.pagination import StandardResultsSetPagination
from apps.api.core.throttling import (
    CheckoutPlaceThrottle,
    CheckoutPreviewThrottle,
    VoucherApplyThrottle,
    VoucherRedeemThrottle,
)
from apps.common.types import BusinessError
from apps.loyalty.services import TierResolver
from apps.orders.models import Order
from apps.orders.pricing import DiscountComposer, PricingPolicy, cart_subtotal
from apps.orders.services import CheckoutData, OrderLifecycleController, OrderQueryService
from apps.promotions.services import VoucherInventory, VoucherValidator

from .serializers import (
    CheckoutPreviewInputSerializer,
    OrderCancelInputSerializer,
    OrderCreateInputSerializer,
    OrderDetailSerializer,
    OrderListSerializer,
    PublicVoucherSerializer,
    RedeemedVoucherSerializer,
    VoucherApplyInputSerializer,
    VoucherRedeemInputSerializer,
)

logger = logging.getLogger(__name__)

# Session key holding the voucher selected for the current cart
SESSION_VOUCHER_KEY = "checkout_voucher_code"


# ===============================================================================
# VOUCHER SELECTION
# ===============================================================================


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@throttle_classes([VoucherApplyThrottle])
def voucher_apply(request: Request) -> Response:
    """
    Validate a voucher for the current cart and select it.
    Replaces any previously selected voucher; a rejected code keeps the old selection.
    """
    serializer = VoucherApplyInputSerializer(data=request.data)
    if not serializer.is_valid():
        return invalid_input_response(serializer.errors)

    lines = serializer.cart_lines()
    subtotal = cart_subtotal(lines)
    result = VoucherValidator.validate(serializer.validated_data["code"], request.user, lines, subtotal)
    if not result.is_valid or result.voucher is None:
        error = result.error or BusinessError(result.error_message)
        # Any rejected code is a validation failure here, unknown codes included
        return business_error_response(error, http_status=status.HTTP_400_BAD_REQUEST)

    request.session[SESSION_VOUCHER_KEY] = result.voucher.code
    tier = TierResolver.tier_for(request.user)
    pricing = DiscountComposer.compose(lines, subtotal, tier, result.voucher, PricingPolicy.from_settings())

    logger.info("🎟️ [Checkout API] User %s selected voucher %s", request.user.pk, result.voucher.code)
    return Response({"voucher": result.voucher.to_dict(), "pricing": pricing.to_dict()})


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def voucher_clear(request: Request) -> Response:
    request.session.pop(SESSION_VOUCHER_KEY, None)
    return Response({"voucher": None})


# ===============================================================================
# PRICING PREVIEW
# ===============================================================================


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@throttle_classes([CheckoutPreviewThrottle])
def checkout_preview(request: Request) -> Response:
    """
    Live pricing preview for a cart.
    Uses the voucher in the request body, else the one selected in the session.
    """
    serializer = CheckoutPreviewInputSerializer(data=request.data)
    if not serializer.is_valid():
        return invalid_input_response(serializer.errors)

    voucher_code = serializer.validated_data.get("voucher_code") or request.session.get(SESSION_VOUCHER_KEY)
    result = OrderLifecycleController.preview(request.user, serializer.cart_lines(), voucher_code)
    if result.is_err():
        return business_error_response(result.unwrap_err())
    return Response(result.unwrap())


# ===============================================================================
# ORDERS
# ===============================================================================


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def orders(request: Request) -> Response:
    """GET lists the caller's orders, POST places a new one"""
    if request.method == "POST":
        return _place_order(request)

    queryset = OrderQueryService.orders_for_user(request.user)
    status_filter = request.query_params.get("status")
    if status_filter:
        normalized = Order.normalize_status(status_filter)
        queryset = queryset.filter(status=normalized) if normalized else queryset.none()

    paginator = StandardResultsSetPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(OrderListSerializer(page, many=True).data)


def _place_order(request: Request) -> Response:
    throttle = CheckoutPlaceThrottle()
    if not throttle.allow_request(request, None):
        return Response(
            {"error": "Too many orders, please wait", "error_code": "THROTTLED"},
            status=status.HTTP_429_TOO_MANY_REQUESTS,
        )

    serializer = OrderCreateInputSerializer(data=request.data)
    if not serializer.is_valid():
        return invalid_input_response(serializer.errors)

    data = serializer.validated_data
    checkout = CheckoutData(
        full_name=data["full_name"],
        phone=data["phone"],
        address=data["address"],
        note=data["note"],
        payment_method=data["payment_method"],
        voucher_code=data.get("voucher_code") or request.session.get(SESSION_VOUCHER_KEY),
        subtotal=data.get("subtotal"),
    )

    result = OrderLifecycleController.place(request.user, serializer.cart_lines(), checkout)
    if result.is_err():
        return business_error_response(result.unwrap_err())

    request.session.pop(SESSION_VOUCHER_KEY, None)
    order = result.unwrap()
    return Response(OrderDetailSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def order_detail(request: Request, order_id: str) -> Response:
    """Order with line items and tracking history"""
    result = OrderQueryService.order_for_user(order_id, request.user)
    if result.is_err():
        return business_error_response(result.unwrap_err())
    return Response(OrderDetailSerializer(result.unwrap()).data)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def order_cancel(request: Request, order_id: str) -> Response:
    """Customer cancellation of a pending or confirmed order"""
    serializer = OrderCancelInputSerializer(data=request.data)
    if not serializer.is_valid():
        return invalid_input_response(serializer.errors)

    result = OrderLifecycleController.cancel_by_customer(order_id, request.user, serializer.validated_data["note"])
    if result.is_err():
        return business_error_response(result.unwrap_err())

    order = result.unwrap()
    logger.info("🛑 [Checkout API] User %s cancelled %s", request.user.pk, order.order_number)
    return Response(OrderDetailSerializer(order).data)


# ===============================================================================
# LOYALTY
# ===============================================================================


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def loyalty_status(request: Request) -> Response:
    """Tier, progress and balances for the caller"""
    request.user.refresh_from_db(fields=["points", "total_points"])
    tier_status = TierResolver.status_for(request.user)
    return Response(
        {
            "points": request.user.points,
            "total_points": request.user.total_points,
            **tier_status.to_dict(),
            "tiers": [tier.to_dict() for tier in TierResolver.get_tiers()],
        }
    )


# ===============================================================================
# VOUCHER LISTINGS & REDEMPTION
# ===============================================================================


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def vouchers_public(request: Request) -> Response:
    vouchers = VoucherValidator.public_vouchers()
    return Response({"results": PublicVoucherSerializer(vouchers, many=True).data})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def vouchers_redeemable(request: Request) -> Response:
    """Private vouchers purchasable with points, flagged when already saved"""
    vouchers = VoucherValidator.redeemable_vouchers()
    saved = set(VoucherInventory.saved_codes(request.user))
    data = PublicVoucherSerializer(vouchers, many=True).data
    for item in data:
        item["is_saved"] = item["code"] in saved
    return Response({"results": data, "points": request.user.points})


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def vouchers_mine(request: Request) -> Response:
    instances = VoucherValidator.available_for_user(request.user)
    return Response({"results": RedeemedVoucherSerializer(instances, many=True).data})


@api_view(["POST"])
@permission_classes([IsAuthenticated])
@throttle_classes([VoucherRedeemThrottle])
def vouchers_redeem(request: Request) -> Response:
    """Spend points on a private voucher"""
    serializer = VoucherRedeemInputSerializer(data=request.data)
    if not serializer.is_valid():
        return invalid_input_response(serializer.errors)

    try:
        instance = VoucherInventory.redeem(request.user, serializer.validated_data["code"])
    except BusinessError as e:
        return business_error_response(e)

    request.user.refresh_from_db(fields=["points"])
    return Response(
        {"voucher": RedeemedVoucherSerializer(instance).data, "points": request.user.points},
        status=status.HTTP_201_CREATED,
    )

