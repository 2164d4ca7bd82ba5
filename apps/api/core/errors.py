# ===============================================================================
# API ERROR MAPPING ⚠️
# ===============================================================================

import logging

from rest_framework import status
from rest_framework.response import Response

from apps.common.types import BusinessError

logger = logging.getLogger(__name__)

# Everything not listed is a validation failure
ERROR_STATUS_CODES: dict[str, int] = {
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVALID_TRANSITION": status.HTTP_409_CONFLICT,
    "TRANSIENT_FAILURE": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def business_error_response(error: BusinessError, http_status: int | None = None) -> Response:
    """Render a business error as ``{"error", "error_code"}`` with its HTTP status"""
    code = http_status or ERROR_STATUS_CODES.get(error.code, status.HTTP_400_BAD_REQUEST)
    if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("🔥 [API] %s: %s", error.code, error.message)
    return Response(error.to_dict(), status=code)


def invalid_input_response(errors: dict) -> Response:  # type: ignore[type-arg]
    return Response(
        {"error": "Invalid input", "error_code": "INVALID_INPUT", "details": errors},
        status=status.HTTP_400_BAD_REQUEST,
    )
