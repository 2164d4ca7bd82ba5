"""
Security event logging for the storefront checkout platform.
"""

import logging
from typing import Any

from apps.common.logging import get_request_context

logger = logging.getLogger(__name__)


def log_security_event(event_type: str, details: dict[str, Any], request_ip: str | None = None) -> None:
    """
    Log security events for monitoring and forensics
    """
    context = get_request_context()
    logger.warning(
        "🚨 [Security] %s: %s from IP: %s",
        event_type,
        details,
        request_ip or context["ip_address"],
        extra={"event_type": event_type, **{f"event_{k}": v for k, v in details.items()}},
    )
