"""
Partner module.

Structure:
- ledger.py: Derived partner balances
- allocation_service.py: Profit allocation and withdrawals
"""

from app.services.partner.allocation_service import PartnerAllocationService
from app.services.partner.ledger import PartnerBalance, PartnerLedger

__all__ = ["PartnerAllocationService", "PartnerBalance", "PartnerLedger"]
