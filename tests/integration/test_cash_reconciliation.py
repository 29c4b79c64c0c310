"""
Integration tests for the derived cash position and reconciliation.

Revenue 1000.00 (fees 29.30) with 50.00 of expenses gives a calculated
balance of 920.70 from a zero starting balance.
"""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.models import CashPosition, CashReconciliation, PayoutReferenceType
from app.services.accounting import CashReconciliationService
from app.services.payout import PayoutQueueService, SettlementService


@pytest.fixture
def books(make_user, add_revenue):
    """Record revenue and an expense."""

    async def _books():
        buyer = await make_user("buyer")
        await add_revenue(buyer, ["1000.00"], expenses=["50.00"])
        return buyer

    return _books


class TestCashPosition:
    """Test the calculated balance."""

    @pytest.mark.asyncio
    async def test_fresh_position(self, session, publisher):
        """Test an empty ledger has a zero balance and no actual."""
        view = await CashReconciliationService(session, publisher).get_position()

        assert view.starting_balance == Decimal("0.00")
        assert view.calculated_balance == Decimal("0.00")
        assert view.actual_balance is None
        assert view.difference is None

    @pytest.mark.asyncio
    async def test_reading_position_writes_nothing(self, session, publisher):
        """Test the baseline row is left to reconcile()."""
        service = CashReconciliationService(session, publisher)
        await service.get_position()
        await service.calculated_balance()

        assert not session.new
        assert await session.scalar(
            select(func.count()).select_from(CashPosition)
        ) == 0

        await service.reconcile(Decimal("10.00"))

        assert await session.scalar(
            select(func.count()).select_from(CashPosition)
        ) == 1
        view = await service.get_position()
        assert view.actual_balance == Decimal("10.00")
        assert view.starting_balance == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_calculated_balance(self, session, publisher, books):
        """Test income minus expenses minus payouts sent."""
        buyer = await books()
        entry = await PayoutQueueService(session, publisher).enqueue(
            buyer.id, Decimal("20.00"), "Trivia win", PayoutReferenceType.GAME
        )
        await SettlementService(session, publisher).settle(entry.id)

        view = await CashReconciliationService(session, publisher).get_position()

        assert view.income == Decimal("970.70")
        assert view.expenses == Decimal("50.00")
        assert view.payouts_sent == Decimal("20.00")
        assert view.calculated_balance == Decimal("900.70")


class TestReconcile:
    """Test reconciling against an observed balance."""

    @pytest.mark.asyncio
    async def test_difference_folds_into_starting_balance(
        self, session, publisher, books
    ):
        """Test calculated equals observed right after reconciling."""
        await books()
        service = CashReconciliationService(session, publisher)

        result = await service.reconcile(Decimal("1000.00"), reconciled_by="ops")

        assert result.calculated_balance == Decimal("920.70")
        assert result.difference == Decimal("79.30")
        assert result.new_starting_balance == Decimal("79.30")

        view = await service.get_position()
        assert view.starting_balance == Decimal("79.30")
        assert view.calculated_balance == Decimal("1000.00")
        assert view.actual_balance == Decimal("1000.00")
        assert view.difference == Decimal("0.00")
        assert view.last_verified_at is not None

    @pytest.mark.asyncio
    async def test_negative_difference(self, session, publisher, books):
        """Test the bank holding less than calculated."""
        await books()
        service = CashReconciliationService(session, publisher)

        result = await service.reconcile(Decimal("900.00"))

        assert result.difference == Decimal("-20.70")
        assert (await service.get_position()).calculated_balance == Decimal("900.00")

    @pytest.mark.asyncio
    async def test_zero_difference_keeps_starting_balance(
        self, session, publisher, books
    ):
        """Test a matching balance only records the verification."""
        await books()
        service = CashReconciliationService(session, publisher)

        result = await service.reconcile(Decimal("920.70"))

        assert result.difference == Decimal("0.00")
        view = await service.get_position()
        assert view.starting_balance == Decimal("0.00")
        assert view.last_verified_at is not None

    @pytest.mark.asyncio
    async def test_reconciliations_are_logged(
        self, session, publisher, books, session_maker
    ):
        """Test every reconciliation appends a log row."""
        await books()
        service = CashReconciliationService(session, publisher)
        await service.reconcile(Decimal("1000.00"), reconciled_by="ops")
        await service.reconcile(Decimal("1000.00"))

        async with session_maker() as check:
            rows = list(
                (
                    await check.execute(
                        select(CashReconciliation).order_by(CashReconciliation.id)
                    )
                ).scalars().all()
            )
        assert [row.difference for row in rows] == [Decimal("79.30"), Decimal("0.00")]
        assert rows[0].previous_starting_balance == Decimal("0.00")
        assert rows[0].reconciled_by == "ops"
        assert rows[1].previous_starting_balance == Decimal("79.30")

        assert len(await service.list_reconciliations()) == 2
