"""
Checked and saturating integer arithmetic for ledger fields.

Python integers never wrap, so every bounded field declares its limit here
and every update goes through these helpers. Checked helpers raise
NumericalOverflowError instead of producing an out-of-range value.

u64 fields are stored in signed BIGINT columns, so their limit is 2**63 - 1.
"""

from menagerie.models.failure import NumericalOverflowError

U16_MAX = 2**16 - 1
U32_MAX = 2**32 - 1
U64_MAX = 2**63 - 1


def checked_add(left: int, right: int, limit: int = U64_MAX) -> int:
    """Add two non-negative values, failing if the sum exceeds `limit`."""
    result = left + right
    if result > limit:
        raise NumericalOverflowError("+", left, right)
    return result


def checked_sub(left: int, right: int) -> int:
    """Subtract, failing if the result would go below zero."""
    result = left - right
    if result < 0:
        raise NumericalOverflowError("-", left, right)
    return result


def checked_mul(left: int, right: int, limit: int = U64_MAX) -> int:
    """Multiply, failing if the product exceeds `limit`."""
    result = left * right
    if result > limit:
        raise NumericalOverflowError("*", left, right)
    return result


def saturating_sub(left: int, right: int) -> int:
    """Subtract, clamping at zero."""
    return max(left - right, 0)
