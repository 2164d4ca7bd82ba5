"""
Type system for the storefront checkout platform
Rust-inspired Result pattern, money aliases and the checkout error taxonomy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

# Type variables for generic Result
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type

# ===============================================================================
# RESULT TYPES
# ===============================================================================


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success result containing a value"""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value"""
        return self.value

    def unwrap_or(self, default: T) -> T:
        """Get the success value (ignores default)"""
        return self.value

    def unwrap_err(self) -> Any:
        """Raises an exception since this is success, not error - provides consistent API"""
        raise ValueError(f"Called unwrap_err on Ok: {self.value}")


@dataclass(frozen=True)
class Err(Generic[E]):
    """Error result containing an error value"""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raises an exception - use unwrap_or() for safe access"""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        """Get the default value since this is an error"""
        return default

    def unwrap_err(self) -> E:
        """Get the error value"""
        return self.error


# Result type alias
Result = Ok[T] | Err[E]

# ===============================================================================
# BUSINESS TYPES
# ===============================================================================

Amount = int  # Money in the smallest store currency unit (VND has no minor unit)
Points = int  # Reward points
VoucherCode = str  # Normalized voucher code: "GIAM30K" or "GIAM30K_X7K2QP"
CategorySlug = str  # Catalog category identifier

# ===============================================================================
# COMMON EXCEPTIONS
# ===============================================================================


class BusinessError(Exception):
    """Base exception for business logic errors"""

    code: ClassVar[str] = "BUSINESS_ERROR"
    default_message: ClassVar[str] = "The operation could not be completed"

    def __init__(self, message: str | None = None, **context: Any) -> None:
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "error_code": self.code}


class NotFound(BusinessError):  # noqa: N818
    """Unknown voucher code, instance, order or tier"""

    code = "NOT_FOUND"
    default_message = "Not found"


class Expired(BusinessError):  # noqa: N818
    """Voucher is outside its validity window"""

    code = "EXPIRED"
    default_message = "This voucher has expired or is not yet valid"


class UsageExhausted(BusinessError):  # noqa: N818
    """Global usage limit reached"""

    code = "USAGE_EXHAUSTED"
    default_message = "This voucher has reached its usage limit"


class MinOrderNotMet(BusinessError):  # noqa: N818
    """Cart subtotal below the voucher minimum"""

    code = "MIN_ORDER_NOT_MET"
    default_message = "Order subtotal is below the voucher minimum"


class CategoryMismatch(BusinessError):  # noqa: N818
    """Cart contains items outside the voucher's category"""

    code = "CATEGORY_MISMATCH"
    default_message = "This voucher only applies when every item is from its category"


class NotYours(BusinessError):  # noqa: N818
    """Voucher is targeted at a different user"""

    code = "NOT_YOURS"
    default_message = "This voucher belongs to another customer"


class InsufficientPoints(BusinessError):  # noqa: N818
    """Spendable balance below the redemption cost"""

    code = "INSUFFICIENT_POINTS"
    default_message = "Not enough points to redeem this voucher"


class AlreadyUsed(BusinessError):  # noqa: N818
    """Voucher instance was already consumed"""

    code = "ALREADY_USED"
    default_message = "This voucher has already been used"


class InvalidTransition(BusinessError):  # noqa: N818
    """Illegal status change or double reversal"""

    code = "INVALID_TRANSITION"
    default_message = "This status change is not allowed"


class PricingMismatch(BusinessError):  # noqa: N818
    """Client-sent subtotal disagrees with the server-side line totals"""

    code = "PRICING_MISMATCH"
    default_message = "Cart subtotal does not match its line items"


class TransientFailure(BusinessError):  # noqa: N818
    """Storage conflicts persisted after all retries"""

    code = "TRANSIENT_FAILURE"
    default_message = "The service is busy, please retry"
