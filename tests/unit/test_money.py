"""
Unit tests for money utilities.

Tests cover:
- Half-up rounding to cents
- Percentage split that always adds up to the total
"""

from decimal import Decimal

from app.utils.money import percentage_of, quantize_money, split_by_percentages


class TestQuantizeMoney:
    """Test cent rounding."""

    def test_rounds_half_up(self):
        """Test 0.005 rounds up to 0.01."""
        assert quantize_money(Decimal("0.005")) == Decimal("0.01")
        assert quantize_money(Decimal("2.345")) == Decimal("2.35")

    def test_keeps_two_places(self):
        """Test integers get two decimal places."""
        assert str(quantize_money(Decimal("200"))) == "200.00"

    def test_accepts_strings(self):
        """Test string input."""
        assert quantize_money("19.999") == Decimal("20.00")


class TestPercentageOf:
    """Test percentage of an amount."""

    def test_simple_percentage(self):
        """Test 60% of 500."""
        assert percentage_of(Decimal("500"), Decimal("60")) == Decimal("300.00")

    def test_fractional_percentage(self):
        """Test 33.33% of 100."""
        assert percentage_of(Decimal("100"), Decimal("33.33")) == Decimal("33.33")


class TestSplitByPercentages:
    """Test splitting a total between shares."""

    def test_sixty_forty(self):
        """Test clean 60/40 split."""
        parts = split_by_percentages(
            Decimal("500.00"), [("a", Decimal("60")), ("b", Decimal("40"))]
        )
        assert parts == {"a": Decimal("300.00"), "b": Decimal("200.00")}

    def test_residual_goes_to_largest_share(self):
        """Test thirds of 100: the extra cent goes to the largest share."""
        parts = split_by_percentages(
            Decimal("100.00"),
            [
                ("a", Decimal("33.33")),
                ("b", Decimal("33.34")),
                ("c", Decimal("33.33")),
            ],
        )
        assert sum(parts.values()) == Decimal("100.00")
        assert parts["b"] == Decimal("33.34")

    def test_residual_tie_goes_to_first(self):
        """Test equal shares: first listed share absorbs the residual."""
        parts = split_by_percentages(
            Decimal("0.01"), [("a", Decimal("50")), ("b", Decimal("50"))]
        )
        assert sum(parts.values()) == Decimal("0.01")
        assert parts["a"] + parts["b"] == Decimal("0.01")
        # Both round half-up to 0.01, so the first share gives one cent back
        assert parts["a"] == Decimal("0.00")
        assert parts["b"] == Decimal("0.01")

    def test_sum_always_matches_total(self):
        """Test sum equals total for awkward amounts."""
        shares = [("a", Decimal("12.5")), ("b", Decimal("37.5")), ("c", Decimal("50"))]
        for total in ("0.03", "1.01", "999.99", "1234.57"):
            parts = split_by_percentages(Decimal(total), shares)
            assert sum(parts.values()) == Decimal(total)
