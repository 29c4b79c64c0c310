"""
Money utilities.

Currency rounding and percentage splitting on Decimal values.
"""

from collections.abc import Hashable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from app.config.business_constants import FULL_PERCENTAGE, MONEY_QUANTUM


def quantize_money(value: Decimal | int | str) -> Decimal:
    """
    Round a value to cents, half-up.

    Args:
        value: Amount to round

    Returns:
        Decimal with exactly two decimal places
    """
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def percentage_of(amount: Decimal, percentage: Decimal) -> Decimal:
    """Return amount * percentage / 100 rounded to cents."""
    return quantize_money(amount * percentage / FULL_PERCENTAGE)


def split_by_percentages(
    total: Decimal,
    shares: Sequence[tuple[Hashable, Decimal]],
) -> dict[Hashable, Decimal]:
    """
    Split a total by percentage shares so the parts add up to the total.

    Each share is rounded half-up to cents. The rounding residual (at most
    a few cents) goes to the share with the largest percentage, first one
    wins on ties.

    Args:
        total: Amount to split (already at cent precision)
        shares: (key, percentage) pairs whose percentages sum to 100

    Returns:
        Mapping key -> amount, in the order of shares
    """
    total = quantize_money(total)
    parts = {key: percentage_of(total, pct) for key, pct in shares}

    residual = total - sum(parts.values(), Decimal("0"))
    if residual and shares:
        largest_key = max(shares, key=lambda share: share[1])[0]
        parts[largest_key] += residual

    return parts
