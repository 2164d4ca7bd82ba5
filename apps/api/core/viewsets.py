# ===============================================================================
# API BASE VIEWSETS 🎯
# ===============================================================================

from typing import ClassVar

from rest_framework import viewsets

from .pagination import StandardResultsSetPagination
from .permissions import IsStaff
from .throttling import AdminAPIThrottle


class StaffModelViewSet(viewsets.ModelViewSet):
    """
    Base viewset for back-office CRUD endpoints.

    Provides consistent:
    - Staff-only permissions
    - Pagination
    - Rate limiting
    """

    permission_classes: ClassVar = [IsStaff]
    pagination_class = StandardResultsSetPagination
    throttle_classes: ClassVar = [AdminAPIThrottle]


class StaffReadOnlyViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Base viewset for read-only back-office listings.
    """

    permission_classes: ClassVar = [IsStaff]
    pagination_class = StandardResultsSetPagination
    throttle_classes: ClassVar = [AdminAPIThrottle]
