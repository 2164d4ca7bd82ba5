"""
Back-office API filters for the storefront platform.
"""

import django_filters
from django.db.models import QuerySet

from apps.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    """Order listing filters; ``status`` accepts display aliases such as ``Completed``"""

    status = django_filters.CharFilter(method="filter_status")
    order_number = django_filters.CharFilter(lookup_expr="icontains")
    email = django_filters.CharFilter(field_name="user__email", lookup_expr="icontains")
    created_after = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="gte")
    created_before = django_filters.IsoDateTimeFilter(field_name="created_at", lookup_expr="lte")

    class Meta:
        model = Order
        fields = ("status", "payment_method", "payment_status", "voucher_code", "tier_slug")

    def filter_status(self, queryset: QuerySet[Order], name: str, value: str) -> QuerySet[Order]:
        normalized = Order.normalize_status(value)
        if normalized is None:
            return queryset.none()
        return queryset.filter(status=normalized)
