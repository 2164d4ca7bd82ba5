"""
Back-office API Views for the storefront platform.
Staff endpoints for tiers, vouchers, order status overrides, customers and the dashboard.
"""

import logging
from typing import Any, ClassVar

from django.db.models import Count, QuerySet
from rest_framework import filters, status
from rest_framework.decorators import action, api_view, permission_classes, throttle_classes
from rest_framework.request import Request
from rest_framework.response import Response

from apps.api.core.errors import business_error_response, invalid_input_response
from apps.api.core.permissions import IsStaff
from apps.api.core.throttling import AdminAPIThrottle
from apps.api.core.viewsets import StaffModelViewSet, StaffReadOnlyViewSet
from apps.common.validators import log_security_event
from apps.loyalty.models import LoyaltyTier
from apps.loyalty.services import TierResolver
from apps.orders.models import Order
from apps.orders.services import OrderLifecycleController, OrderQueryService
from apps.promotions.models import VoucherDefinition
from apps.users.models import User

from .filters import OrderFilter
from .serializers import (
    AdminOrderSerializer,
    CustomerSerializer,
    LoyaltyTierSerializer,
    OrderStatusUpdateSerializer,
    VoucherDefinitionSerializer,
)

logger = logging.getLogger(__name__)


# ===============================================================================
# LOYALTY TIERS
# ===============================================================================


class LoyaltyTierViewSet(StaffModelViewSet):
    """Tier ladder CRUD. Saves and deletes drop the cached ladder through model signals."""

    queryset = LoyaltyTier.objects.all().order_by("min_points")
    serializer_class = LoyaltyTierSerializer

    def perform_destroy(self, instance: LoyaltyTier) -> None:
        logger.info("🗑️ [Admin API] Tier %s deleted by %s", instance.slug, self.request.user.pk)
        instance.delete()


# ===============================================================================
# VOUCHERS
# ===============================================================================


class VoucherDefinitionViewSet(StaffModelViewSet):
    queryset = VoucherDefinition.objects.all().order_by("-created_at")
    serializer_class = VoucherDefinitionSerializer
    filter_backends: ClassVar = [filters.SearchFilter]
    search_fields: ClassVar = ["code", "description", "target_category"]


# ===============================================================================
# ORDERS
# ===============================================================================


class AdminOrderViewSet(StaffReadOnlyViewSet):
    """Order listing for staff with a manual status override"""

    queryset = Order.objects.select_related("user").prefetch_related("items", "status_history")
    serializer_class = AdminOrderSerializer
    filterset_class = OrderFilter

    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request: Request, pk: Any = None) -> Response:
        """Re-enter the lifecycle controller exactly like a regular transition"""
        order = self.get_object()
        serializer = OrderStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return invalid_input_response(serializer.errors)

        new_status = serializer.validated_data["status"]
        old_status = order.status
        result = OrderLifecycleController.transition(
            order, new_status, note=serializer.validated_data["note"], changed_by=request.user
        )
        if result.is_err():
            return business_error_response(result.unwrap_err())

        order = result.unwrap()
        log_security_event(
            "admin_order_override",
            {
                "order_number": order.order_number,
                "old_status": old_status,
                "new_status": order.status,
                "staff_user_id": str(request.user.pk),
            },
            request_ip=request.META.get("REMOTE_ADDR"),
        )
        fresh = self.get_queryset().get(pk=order.pk)
        return Response(self.get_serializer(fresh).data)


# ===============================================================================
# CUSTOMERS
# ===============================================================================


class CustomerViewSet(StaffReadOnlyViewSet):
    """Customers with points balances and resolved tier"""

    serializer_class = CustomerSerializer
    filter_backends: ClassVar = [filters.SearchFilter, filters.OrderingFilter]
    search_fields: ClassVar = ["email", "first_name", "last_name", "phone"]
    ordering_fields: ClassVar = ["total_points", "points", "date_joined"]

    def get_queryset(self) -> QuerySet[User]:
        return User.objects.filter(is_staff=False).annotate(order_count=Count("orders")).order_by("-total_points")

    def get_serializer_context(self) -> dict[str, Any]:
        return {**super().get_serializer_context(), "tiers": TierResolver.get_tiers()}


# ===============================================================================
# DASHBOARD
# ===============================================================================


@api_view(["GET"])
@permission_classes([IsStaff])
@throttle_classes([AdminAPIThrottle])
def dashboard(request: Request) -> Response:
    """Revenue from delivered orders plus order and customer counts"""
    return Response(OrderQueryService.dashboard_stats(), status=status.HTTP_200_OK)
