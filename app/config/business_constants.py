"""
Business logic constants for the matrix ledger.

Central location for business rules and constants used across the application.
This module can be imported by services, repositories and the API without
circular dependencies.
"""

from decimal import Decimal


# Matrix layout: slot 1 is the owner, slots 2-7 are filled by placement
MATRIX_SLOT_COUNT = 7
OWNER_SLOT = 1

# Slots a referrer's own matrix offers to their direct referrals
DIRECT_REFERRAL_SLOTS = (2, 3)

# Fixed order in which the FIFO scan fills a matrix
FILL_ORDER = (2, 3, 4, 5, 6, 7)

# Slots whose placement counts as "matrix growth" for the owner
GROWTH_SLOTS = (4, 5, 6, 7)

# Currency precision (cents)
MONEY_QUANTUM = Decimal("0.01")

# Partner percentages must add up to exactly this value
FULL_PERCENTAGE = Decimal("100")

# Differences under one cent count as matched in period reconciliation
RECONCILIATION_MATCH_TOLERANCE = Decimal("0.01")

# Runtime-overridable settings stored in app_settings
APP_SETTING_MATRIX_PAYOUT = "matrix_payout"
