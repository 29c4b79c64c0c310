"""Matrix ledger application package."""
