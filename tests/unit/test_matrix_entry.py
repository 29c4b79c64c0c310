"""
Unit tests for the matrix slot-state array.

Tests cover:
- Slot states built from slot rows
- First free slot in direct-referral and FIFO order
- Fullness
"""

from decimal import Decimal

from app.config.business_constants import DIRECT_REFERRAL_SLOTS, FILL_ORDER
from app.models import MatrixEntry, MatrixSlot


def build_matrix(occupied: dict[int, int]) -> MatrixEntry:
    """Transient matrix with the given slot -> participant map."""
    entry = MatrixEntry(id=1, user_id=100, payout_amount=Decimal("200.00"))
    entry.slots = [
        MatrixSlot(slot_index=index, participant_id=participant)
        for index, participant in sorted(occupied.items())
    ]
    return entry


class TestSlotStates:
    """Test slot-state array."""

    def test_new_matrix_has_owner_only(self):
        """Test only slot 1 is filled on a fresh matrix."""
        entry = build_matrix({1: 100})
        assert entry.slot_states() == [100, None, None, None, None, None, None]
        assert entry.filled_count == 1

    def test_states_follow_slot_index(self):
        """Test slot rows land at their index regardless of order."""
        entry = build_matrix({1: 100, 5: 105, 2: 102})
        assert entry.slot_states() == [100, 102, None, None, 105, None, None]


class TestFirstFreeIndex:
    """Test free slot lookup."""

    def test_fifo_order_starts_at_slot_two(self):
        """Test FIFO fill starts with slot 2."""
        entry = build_matrix({1: 100})
        assert entry.first_free_index(FILL_ORDER) == 2

    def test_fifo_skips_taken_slots(self):
        """Test first gap in fill order is returned."""
        entry = build_matrix({1: 100, 2: 102, 3: 103, 4: 104})
        assert entry.first_free_index(FILL_ORDER) == 5

    def test_direct_referral_slots_only(self):
        """Test referrer slots are only 2 and 3."""
        entry = build_matrix({1: 100, 2: 102, 3: 103})
        assert entry.first_free_index(DIRECT_REFERRAL_SLOTS) is None
        assert entry.first_free_index(FILL_ORDER) == 4

    def test_slot_three_when_two_taken(self):
        """Test second direct referral goes to slot 3."""
        entry = build_matrix({1: 100, 2: 102})
        assert entry.first_free_index(DIRECT_REFERRAL_SLOTS) == 3


class TestIsFull:
    """Test fullness."""

    def test_full_matrix(self):
        """Test all seven slots filled."""
        entry = build_matrix({i: 100 + i for i in range(1, 8)})
        assert entry.is_full is True
        assert entry.filled_count == 7
        assert entry.first_free_index() is None

    def test_one_slot_missing(self):
        """Test six of seven is not full."""
        entry = build_matrix({i: 100 + i for i in range(1, 7)})
        assert entry.is_full is False
