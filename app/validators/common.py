"""
Common validators.

Parse and validate operator-entered input. Every validator returns a
(is_valid, parsed_value, error_message) tuple.
"""

import re
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

from app.utils.datetime_utils import ensure_utc


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_amount(
    value: str | int | float | Decimal | None,
    min_val: Decimal = Decimal("0"),
    max_val: Decimal | None = None,
    allow_zero: bool = False,
) -> tuple[bool, Decimal | None, str | None]:
    """
    Validate a monetary amount.

    Args:
        value: Amount as entered (string or number)
        min_val: Minimum allowed value
        max_val: Maximum allowed value (optional)
        allow_zero: Accept exactly zero

    Returns:
        Tuple of (is_valid, parsed_value, error_message)

    Examples:
        >>> validate_amount("100.50")
        (True, Decimal('100.50'), None)
        >>> validate_amount("-10")
        (False, None, 'Amount must be >= 0')
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return False, None, "Amount is empty"

    if isinstance(value, bool):
        return False, None, "Invalid amount format"

    if isinstance(value, str):
        value = value.strip().replace(",", ".").lstrip("$")

    try:
        # str() first so 0.1 parses as Decimal("0.1")
        amount = Decimal(str(value))
    except InvalidOperation:
        return False, None, "Invalid amount format"

    if not amount.is_finite():
        return False, None, "Amount must be a finite number"

    if amount < min_val:
        return False, None, f"Amount must be >= {min_val}"

    if amount == 0 and not allow_zero:
        return False, None, "Amount must be greater than 0"

    if max_val is not None and amount > max_val:
        return False, None, f"Amount must be <= {max_val}"

    # Check precision (cents)
    if amount.as_tuple().exponent < -2:
        return False, None, "Amount has too many decimal places (maximum 2)"

    return True, amount, None


def validate_email(value: str | None) -> tuple[bool, str | None, str | None]:
    """
    Validate and normalize an email address.

    Args:
        value: Email as entered

    Returns:
        Tuple of (is_valid, normalized_email, error_message)
    """
    if not value or not value.strip():
        return False, None, "Email is empty"

    email = value.strip().lower()
    if len(email) > 255:
        return False, None, "Email is too long (maximum 255 characters)"
    if not EMAIL_PATTERN.match(email):
        return False, None, "Invalid email format"

    return True, email, None


def validate_timestamp(
    value: str | None,
) -> tuple[bool, datetime | None, str | None]:
    """
    Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Args:
        value: Timestamp string

    Returns:
        Tuple of (is_valid, parsed_datetime, error_message)
    """
    if not value:
        return False, None, "Timestamp is empty"

    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return False, None, f"Invalid timestamp: {value}"

    return True, ensure_utc(parsed).astimezone(UTC), None
