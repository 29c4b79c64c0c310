"""
Formatters utility.

Utility functions for formatting data in the app layer.
"""

from datetime import datetime
from decimal import Decimal

from app.utils.datetime_utils import ensure_utc
from app.utils.money import quantize_money


def format_user_identifier(user) -> str:
    """
    Format user as @username or ID:id.

    Args:
        user: Object with username and id attributes

    Returns:
        Formatted string like "@username" or "ID:123"
    """
    if getattr(user, 'username', None):
        return f"@{user.username}"
    if getattr(user, 'id', None) is not None:
        return f"ID:{user.id}"
    return "Unknown"


def format_currency(amount: Decimal | None) -> str:
    """
    Format amount as dollars for emails and notifications.

    Args:
        amount: Amount or None

    Returns:
        String like "$1,234.50"
    """
    if amount is None:
        amount = Decimal("0")
    return f"${quantize_money(amount):,.2f}"


def money_str(amount: Decimal | None) -> str | None:
    """Serialize a monetary value as a 2-decimal string."""
    if amount is None:
        return None
    return str(quantize_money(amount))


def iso(value: datetime | None) -> str | None:
    """Serialize a timestamp as ISO-8601."""
    return ensure_utc(value).isoformat() if value else None
