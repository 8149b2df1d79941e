"""
Helpers for plan limits and prices returned by the pricing and subscription endpoints.

In the API, a limit of -1 means unlimited and None means the feature is not
part of the plan.
"""

from typing import Optional, Union

UNLIMITED = -1

Number = Union[int, float]


def is_unlimited(value: Optional[Number]) -> bool:
    return value == UNLIMITED


def is_limit_not_applicable(value: Optional[Number]) -> bool:
    return value is None


def format_limit(
    value: Optional[Number], unlimited_text: str = "Unlimited", na_text: str = "N/A"
) -> str:
    """
    Format a limit for display.

    Example:
        format_limit(-1)    # "Unlimited"
        format_limit(None)  # "N/A"
        format_limit(2500)  # "2,500"
    """
    if value is None:
        return na_text
    if value == UNLIMITED:
        return unlimited_text
    return f"{value:,}"


def format_price(value: Optional[Number], currency: str = "$", na_text: str = "N/A") -> str:
    """Format a price with at most two decimals; 0 is shown as "Free"."""
    if value is None:
        return na_text
    if value == 0:
        return "Free"
    amount = f"{value:,.2f}".rstrip("0").rstrip(".")
    return f"{currency}{amount}"


def is_within_limit(usage: Number, limit: Optional[Number]) -> bool:
    if limit is None:
        return False  # feature not available on this plan
    if limit == UNLIMITED:
        return True
    return usage < limit


def get_remaining_capacity(usage: Number, limit: Optional[Number]) -> Optional[Number]:
    """Remaining capacity, -1 for unlimited, None when not applicable."""
    if limit is None:
        return None
    if limit == UNLIMITED:
        return UNLIMITED
    return max(0, limit - usage)
