"""
Validators package.

Provides common validation functions for operator input.
"""

from app.validators.common import (
    validate_amount,
    validate_email,
    validate_timestamp,
)


__all__ = [
    "validate_amount",
    "validate_email",
    "validate_timestamp",
]
