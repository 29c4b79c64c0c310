"""
Payout module.

Structure:
- queue_service.py: Queue obligations, queue listing and stats
- settlement_service.py: Queue -> history settlement, history listing
- reconciliation_service.py: Payout period reconciliation
"""

from app.services.payout.queue_service import PayoutQueueService, PayoutQueueStats
from app.services.payout.reconciliation_service import PayoutReconciliationService
from app.services.payout.settlement_service import SettlementService

__all__ = [
    "PayoutQueueService",
    "PayoutQueueStats",
    "PayoutReconciliationService",
    "SettlementService",
]
