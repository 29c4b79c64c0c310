"""
Operational constants for the matrix ledger.

Technical/operational constants used across the application.
Includes query limits and task time limits.
"""

# =============================================================================
# QUERY LIMITS
# =============================================================================

# Payout history listing is newest first and bounded
PAYOUT_HISTORY_PAGE_SIZE = 500

# Period reconciliations shown to operators
RECONCILIATION_LIST_LIMIT = 100

# Matrix list page size for the admin API
MATRIX_LIST_LIMIT = 200

# Prize wins shown to operators
PRIZE_LIST_LIMIT = 200


# =============================================================================
# DRAMATIQ TASK TIME LIMITS (milliseconds)
# =============================================================================

# Short tasks (1 minute) - notifications, single emails
DRAMATIQ_TIME_LIMIT_SHORT = 60_000

# Standard tasks (5 minutes) - reminders, batch jobs
DRAMATIQ_TIME_LIMIT_STANDARD = 300_000


# =============================================================================
# RETRY CONFIGURATIONS
# =============================================================================

# Notification and email delivery
NOTIFICATION_MAX_RETRIES = 3
