"""
Matrix module.

Structure:
- config.py: Per-call matrix configuration
- store.py: Matrix creation and read projections
- placement_resolver.py: Referral-priority then FIFO placement
- completion_detector.py: Completion flip and payout obligation

Usage:
    from app.services.matrix import PlacementResolver

    resolver = PlacementResolver(session)
    result = await resolver.place(participant_id, referrer_handle="alice")
"""

from app.services.matrix.completion_detector import CompletionDetector
from app.services.matrix.config import MatrixConfig, load_matrix_config
from app.services.matrix.placement_resolver import PlacementResolver, PlacementResult
from app.services.matrix.store import MatrixStore

__all__ = [
    "CompletionDetector",
    "MatrixConfig",
    "MatrixStore",
    "PlacementResolver",
    "PlacementResult",
    "load_matrix_config",
]
