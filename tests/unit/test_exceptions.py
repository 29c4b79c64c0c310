"""
Unit tests for the exception taxonomy.

Tests cover:
- Category helpers
- HTTP status mapping of domain errors
"""

import asyncio

import aiohttp

from app.api.app import error_status
from app.utils.exceptions import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    MatrixNotFoundError,
    ParticipantAlreadyPlacedError,
    PayoutAlreadySettledError,
    ReferrerNotFoundError,
    SideEffectFailure,
    ValidationError,
    is_safe_to_ignore,
)


class TestCategories:
    """Test exception categories."""

    def test_side_effects_are_safe_to_ignore(self):
        """Test email and delivery failures can be swallowed."""
        assert is_safe_to_ignore(SideEffectFailure("x"))
        assert is_safe_to_ignore(aiohttp.ClientConnectionError())
        assert is_safe_to_ignore(asyncio.TimeoutError())

    def test_domain_errors_are_not_ignored(self):
        """Test validation and invariant errors propagate."""
        assert not is_safe_to_ignore(ValidationError("x"))
        assert not is_safe_to_ignore(ParticipantAlreadyPlacedError("x"))

    def test_message_attribute(self):
        """Test message is kept."""
        assert PayoutAlreadySettledError("done").message == "done"


class TestErrorStatus:
    """Test HTTP status mapping."""

    def test_validation_is_400(self):
        assert error_status(ValidationError("x")) == 400

    def test_not_found_is_404(self):
        assert error_status(EntityNotFoundError("x")) == 404
        assert error_status(ReferrerNotFoundError("x")) == 404

    def test_invariant_violations_are_409(self):
        assert error_status(ParticipantAlreadyPlacedError("x")) == 409
        assert error_status(PayoutAlreadySettledError("x")) == 409
        assert error_status(MatrixNotFoundError("x")) == 409
        assert error_status(ConcurrencyConflictError("x")) == 409
