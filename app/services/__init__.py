"""
Services.

Business logic layer.
"""

# Base Service Infrastructure
from app.services.base_service import BaseService, transaction
from app.services.events import (
    DomainEvent,
    DramatiqEventPublisher,
    EmailEvent,
    EventPublisher,
    NotificationEvent,
    get_default_publisher,
)

# Core Services
from app.services.matrix import (
    CompletionDetector,
    MatrixStore,
    PlacementResolver,
    PlacementResult,
)
from app.services.payout import (
    PayoutQueueService,
    PayoutReconciliationService,
    SettlementService,
)

# Accounting Services
from app.services.accounting import CashReconciliationService, ProfitCalculator
from app.services.partner import PartnerAllocationService, PartnerLedger

# Notification Services
from app.services.notification_service import NotificationService


__all__ = [
    # Base
    "BaseService",
    "transaction",
    "DomainEvent",
    "DramatiqEventPublisher",
    "EmailEvent",
    "EventPublisher",
    "NotificationEvent",
    "get_default_publisher",
    # Core
    "CompletionDetector",
    "MatrixStore",
    "PlacementResolver",
    "PlacementResult",
    "PayoutQueueService",
    "PayoutReconciliationService",
    "SettlementService",
    # Accounting
    "CashReconciliationService",
    "ProfitCalculator",
    "PartnerAllocationService",
    "PartnerLedger",
    # Notifications
    "NotificationService",
]
