"""
Accounting module.

Structure:
- profit_calculator.py: P&L summary and available profit
- cash_reconciliation.py: Derived cash balance and reconciliation
"""

from app.services.accounting.cash_reconciliation import (
    CashPositionView,
    CashReconciliationService,
    ReconciliationResult,
)
from app.services.accounting.profit_calculator import (
    FinancialSummary,
    ProfitCalculator,
    calculate_available_profit,
    calculate_processing_fees,
)

__all__ = [
    "CashPositionView",
    "CashReconciliationService",
    "FinancialSummary",
    "ProfitCalculator",
    "ReconciliationResult",
    "calculate_available_profit",
    "calculate_processing_fees",
]
