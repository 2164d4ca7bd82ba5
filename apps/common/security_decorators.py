"""
Transaction and performance decorators for the storefront checkout platform.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any

from django.db import OperationalError, transaction

from apps.common.types import TransientFailure

logger = logging.getLogger(__name__)

_DEFAULT_MAX_RETRIES = 3


def get_max_retries() -> int:
    """Get conflict retry budget from SettingsService (runtime)."""
    from apps.settings.services import SettingsService  # noqa: PLC0415

    return SettingsService.get_integer_setting("checkout.max_retries", _DEFAULT_MAX_RETRIES)


# ===============================================================================
# ATOMIC BUSINESS LOGIC DECORATORS
# ===============================================================================


def atomic_with_retry(
    max_retries: int | None = None, delay: float = 0.1
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Atomic transaction with retry logic for storage conflicts.

    Only OperationalError (lock timeouts, serialization failures, "database is locked")
    is retried; business errors propagate on the first attempt. When nested inside an
    outer transaction the call runs once, the outermost wrapper owns the retry loop.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if transaction.get_connection().in_atomic_block:
                with transaction.atomic():
                    return func(*args, **kwargs)

            attempts = max_retries if max_retries is not None else get_max_retries()
            attempts = max(1, attempts)
            last_exception: OperationalError | None = None

            for attempt in range(attempts):
                try:
                    with transaction.atomic():
                        return func(*args, **kwargs)

                except OperationalError as e:
                    last_exception = e
                    if attempt < attempts - 1:
                        time.sleep(delay * (attempt + 1))  # Linear backoff
                        logger.warning("🔄 [Retry] Retry %d for %s: %s", attempt + 1, func.__name__, e)
                    else:
                        logger.error("🔥 [Retry] All retries failed for %s: %s", func.__name__, e)

            raise TransientFailure(
                f"{func.__name__} failed after {attempts} attempts",
                cause=str(last_exception),
            ) from last_exception

        return wrapper

    return decorator


# ===============================================================================
# PERFORMANCE MONITORING DECORATORS
# ===============================================================================


def monitor_performance(
    max_duration_seconds: float = 5.0, alert_threshold: float = 2.0
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Monitor method performance and alert on slow operations
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
                duration = time.time() - start_time

                if duration > alert_threshold:
                    logger.warning("⚠️ [Performance] Slow operation %s: %.2fs", func.__name__, duration)

                if duration > max_duration_seconds:
                    logger.error("🐢 [Performance] Extremely slow operation %s: %.2fs", func.__name__, duration)

                return result

            except Exception as e:
                duration = time.time() - start_time
                logger.error("🔥 [Performance] Failed operation %s after %.2fs: %s", func.__name__, duration, e)
                raise

        return wrapper

    return decorator
