"""
Unit tests for profit arithmetic.

Tests cover:
- Processing fees (percentage plus fixed fee per campaign)
- Available profit formula and its floor at zero
"""

from decimal import Decimal

from app.services.accounting import calculate_available_profit, calculate_processing_fees


class TestProcessingFees:
    """Test processing fee calculation."""

    def test_default_rates(self):
        """Test 2.9% + 0.30 per campaign."""
        fees = calculate_processing_fees(
            Decimal("1000.00"), 1, Decimal("2.9"), Decimal("0.30")
        )
        assert fees == Decimal("29.30")

    def test_multiple_campaigns(self):
        """Test fixed fee is charged per campaign."""
        fees = calculate_processing_fees(
            Decimal("300.00"), 3, Decimal("2.9"), Decimal("0.30")
        )
        # 8.70 + 0.90
        assert fees == Decimal("9.60")

    def test_no_revenue(self):
        """Test no campaigns means no fees."""
        assert calculate_processing_fees(
            Decimal("0"), 0, Decimal("2.9"), Decimal("0.30")
        ) == Decimal("0.00")


class TestAvailableProfit:
    """Test available profit formula."""

    def test_full_owner_share(self):
        """Test (net - expenses - matrix payouts) at 100%."""
        available = calculate_available_profit(
            net_revenue=Decimal("970.70"),
            total_expenses=Decimal("100.00"),
            matrix_payouts_sent=Decimal("200.00"),
            owner_retained_percentage=Decimal("100"),
            already_allocated=Decimal("0"),
        )
        assert available == Decimal("670.70")

    def test_retained_percentage_and_allocations(self):
        """Test owner percentage applies before prior allocations."""
        available = calculate_available_profit(
            net_revenue=Decimal("1000.00"),
            total_expenses=Decimal("0"),
            matrix_payouts_sent=Decimal("0"),
            owner_retained_percentage=Decimal("75"),
            already_allocated=Decimal("250.00"),
        )
        assert available == Decimal("500.00")

    def test_never_negative(self):
        """Test over-allocation floors at zero."""
        available = calculate_available_profit(
            net_revenue=Decimal("100.00"),
            total_expenses=Decimal("200.00"),
            matrix_payouts_sent=Decimal("0"),
            owner_retained_percentage=Decimal("100"),
            already_allocated=Decimal("0"),
        )
        assert available == Decimal("0.00")
