# ===============================================================================
# PYTEST CONFIGURATION FOR THE STOREFRONT CHECKOUT PLATFORM
# ===============================================================================
"""
Global test configuration.

Test Structure:
- tests/ mirrors apps/ structure for app-specific tests
- tests/api/ for HTTP-level checkout and back-office tests

Run specific app tests: pytest tests/orders/
Run all tests: pytest tests/
"""

import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def clear_cache():
    """Settings values and the tier ladder live in the cache, which outlives test transactions"""
    cache.clear()
    yield
    cache.clear()
