"""
Partner allocation service.

Splits a profit amount among active partners by percentage and records
partner withdrawals.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.config.business_constants import FULL_PERCENTAGE
from app.models.enums import PartnerTransactionType
from app.models.partner_transaction import PartnerTransaction
from app.repositories.audit_log_repository import AdminAuditLogRepository
from app.repositories.partner_repository import (
    PartnerRepository,
    PartnerTransactionRepository,
)
from app.services.accounting.profit_calculator import ProfitCalculator
from app.services.base_service import BaseService, transaction
from app.services.partner.ledger import PartnerLedger
from app.utils.exceptions import EntityNotFoundError, ValidationError
from app.utils.formatters import format_currency, money_str
from app.utils.money import quantize_money, split_by_percentages


class PartnerAllocationService(BaseService):
    """Write side of the partner ledger."""

    def __init__(self, session: AsyncSession, publisher=None) -> None:
        """
        Initialize partner allocation service.

        Args:
            session: Database session
            publisher: Event publisher
        """
        super().__init__(session, publisher)
        self.partner_repo = PartnerRepository(session)
        self.transaction_repo = PartnerTransactionRepository(session)
        self.audit_repo = AdminAuditLogRepository(session)
        self.ledger = PartnerLedger(session)
        self.profit_calculator = ProfitCalculator(session)

    @transaction
    async def allocate(
        self,
        total_amount: Decimal,
        allocated_by: str | None = None,
    ) -> list[PartnerTransaction]:
        """
        Allocate profit to active partners.

        Every check runs before the first write. Shares are rounded
        half-up to cents and the rounding residual goes to the largest
        share, so the batch always sums to total_amount.

        Args:
            total_amount: Amount to allocate
            allocated_by: Operator handle

        Returns:
            Created allocation transactions

        Raises:
            ValidationError: Non-positive amount, percentages not 100,
                or amount above available profit
        """
        if total_amount is None or total_amount <= 0:
            raise ValidationError("Allocation amount must be greater than 0")
        total = quantize_money(total_amount)
        if total != total_amount:
            raise ValidationError("Allocation amount must have at most 2 decimal places")

        # Concurrent allocations queue up on the partner row locks
        partners = await self.partner_repo.list_active(for_update=True)
        if not partners:
            raise ValidationError("No active partners to allocate to")

        total_percentage = sum((p.percentage for p in partners), Decimal("0"))
        if total_percentage != FULL_PERCENTAGE:
            raise ValidationError(
                f"Active partner percentages must total 100% "
                f"(currently {total_percentage}%)"
            )

        summary = await self.profit_calculator.summary()
        if total > summary.available_profit:
            raise ValidationError(
                f"Allocation of {format_currency(total)} exceeds available "
                f"profit of {format_currency(summary.available_profit)}"
            )

        shares = split_by_percentages(
            total, [(partner.id, partner.percentage) for partner in partners]
        )
        description = f"Profit allocation - {format_currency(total)} total"

        transactions = []
        for partner in partners:
            amount = shares[partner.id]
            if amount <= 0:
                continue
            transactions.append(
                await self.transaction_repo.create(
                    partner_id=partner.id,
                    type=PartnerTransactionType.ALLOCATION.value,
                    amount=amount,
                    description=description,
                )
            )

        await self.audit_repo.record(
            action="profit_allocated",
            table_name="partner_transactions",
            record_id=None,
            new_value={
                "total": total,
                "shares": {str(pid): money_str(amount) for pid, amount in shares.items()},
            },
            description=description,
            actor=allocated_by,
        )

        self.logger.info(
            "Profit allocated",
            extra={
                "total": str(total),
                "partners": len(transactions),
                "available_before": str(summary.available_profit),
            },
        )
        return transactions

    @transaction
    async def withdraw(
        self,
        partner_id: int,
        amount: Decimal,
        payment_method: str | None = None,
        payment_handle: str | None = None,
        confirmation_number: str | None = None,
        notes: str | None = None,
        withdrawn_by: str | None = None,
    ) -> PartnerTransaction:
        """
        Record a partner withdrawal.

        Args:
            partner_id: Partner ID
            amount: Amount withdrawn
            payment_method: Method used (defaults to the partner's)
            payment_handle: Handle paid to (defaults to the partner's)
            confirmation_number: Provider confirmation
            notes: Operator notes
            withdrawn_by: Operator handle

        Returns:
            Created withdrawal transaction

        Raises:
            EntityNotFoundError: Partner does not exist
            ValidationError: Non-positive amount or above balance
        """
        if amount is None or amount <= 0:
            raise ValidationError("Withdrawal amount must be greater than 0")
        amount = quantize_money(amount)

        # Lock the partner so concurrent withdrawals see each other
        partner = await self.partner_repo.get_for_update(partner_id)
        if partner is None:
            raise EntityNotFoundError(f"Partner {partner_id} not found")

        balance = await self.ledger.balance(partner_id)
        if amount > balance:
            raise ValidationError(
                f"Withdrawal of {format_currency(amount)} exceeds "
                f"{partner.name}'s balance of {format_currency(balance)}"
            )

        withdrawal = await self.transaction_repo.create(
            partner_id=partner_id,
            type=PartnerTransactionType.WITHDRAWAL.value,
            amount=amount,
            description=f"Withdrawal - {format_currency(amount)}",
            payment_method=payment_method or partner.payment_method,
            payment_handle=payment_handle or partner.payment_handle,
            confirmation_number=confirmation_number,
            notes=notes,
        )

        await self.audit_repo.record(
            action="partner_withdrawal",
            table_name="partner_transactions",
            record_id=withdrawal.id,
            new_value={"partner_id": partner_id, "amount": amount},
            description=f"{partner.name} withdrew {format_currency(amount)}",
            actor=withdrawn_by,
        )

        self.logger.info(
            "Partner withdrawal recorded",
            extra={
                "partner_id": partner_id,
                "amount": str(amount),
                "balance_before": str(balance),
            },
        )
        return withdrawal
