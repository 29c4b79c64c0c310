"""Initial schema: users, matrices, payouts, partners, finance.

Revision ID: 20260301_000001
Revises:
Create Date: 2026-03-01

Creates every table of the matrix ledger:
1. users, ad_campaigns
2. matrix_entries, matrix_slots
3. payout_queue, payout_history, payout_reconciliations, prize_payouts
4. partners, partner_transactions, finance_allocations, expenses
5. cash_position, cash_reconciliations
6. notifications, admin_audit_log, app_settings
"""

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision = '20260301_000001'
down_revision = None
branch_labels = None
depends_on = None


MONEY = sa.DECIMAL(precision=12, scale=2)
PERCENT = sa.DECIMAL(precision=5, scale=2)


def _created_at(name: str = 'created_at') -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(255), nullable=True),
        sa.Column('referral_code', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_handle', sa.String(255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _created_at(),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index(
        'ix_users_referral_code', 'users', ['referral_code'], unique=True
    )

    op.create_table(
        'ad_campaigns',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('amount_paid', MONEY, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _created_at(),
        sa.CheckConstraint(
            'amount_paid >= 0', name='check_campaign_amount_non_negative'
        ),
    )
    op.create_index('ix_ad_campaigns_user_id', 'ad_campaigns', ['user_id'])

    # Matrices
    op.create_table(
        'matrix_entries',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'campaign_id',
            sa.Integer(),
            sa.ForeignKey('ad_campaigns.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('payout_amount', MONEY, nullable=False),
        sa.Column('payout_status', sa.String(20), nullable=True),
        sa.Column('payout_method', sa.String(50), nullable=True),
        sa.Column('payout_handle', sa.String(255), nullable=True),
        sa.Column('payout_sent_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "payout_status IS NULL OR payout_status = 'pending' "
            "OR is_completed = true",
            name='check_matrix_paid_implies_completed',
        ),
        sa.CheckConstraint(
            'payout_amount > 0', name='check_matrix_payout_positive'
        ),
    )
    op.create_index('ix_matrix_entries_user_id', 'matrix_entries', ['user_id'])
    op.create_index(
        'ix_matrix_entries_payout_status', 'matrix_entries', ['payout_status']
    )
    op.create_index(
        'idx_matrix_entries_open',
        'matrix_entries',
        ['is_active', 'is_completed', 'created_at'],
    )

    op.create_table(
        'matrix_slots',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'matrix_id',
            sa.Integer(),
            sa.ForeignKey('matrix_entries.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('slot_index', sa.Integer(), nullable=False),
        sa.Column(
            'participant_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('was_auto_placed', sa.Boolean(), nullable=False),
        sa.Column('placed_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            'matrix_id', 'slot_index', name='uq_matrix_slots_matrix_slot'
        ),
        sa.UniqueConstraint('participant_id', name='uq_matrix_slots_participant'),
        sa.CheckConstraint(
            'slot_index >= 1 AND slot_index <= 7',
            name='check_matrix_slot_index_range',
        ),
    )
    op.create_index('ix_matrix_slots_matrix_id', 'matrix_slots', ['matrix_id'])

    # Payouts
    op.create_table(
        'payout_queue',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('reference_type', sa.String(20), nullable=False),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_handle', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('queued_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount > 0', name='check_payout_queue_amount_positive'),
    )
    op.create_index('ix_payout_queue_user_id', 'payout_queue', ['user_id'])
    op.create_index('idx_payout_queue_queued_at', 'payout_queue', ['queued_at'])
    op.create_index(
        'idx_payout_queue_reference',
        'payout_queue',
        ['reference_type', 'reference_id'],
    )

    op.create_table(
        'payout_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('queue_entry_id', sa.Integer(), nullable=False, unique=True),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('reference_type', sa.String(20), nullable=False),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_handle', sa.String(255), nullable=True),
        sa.Column('confirmation_number', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('queued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('paid_by', sa.String(255), nullable=True),
    )
    op.create_index('ix_payout_history_user_id', 'payout_history', ['user_id'])
    op.create_index('idx_payout_history_paid_at', 'payout_history', ['paid_at'])

    op.create_table(
        'payout_reconciliations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('period_label', sa.String(100), nullable=False),
        sa.Column('period_start', sa.DateTime(timezone=True), nullable=False),
        sa.Column('period_end', sa.DateTime(timezone=True), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('system_total', MONEY, nullable=False),
        sa.Column('verified_total', MONEY, nullable=False),
        sa.Column('discrepancy_amount', MONEY, nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(255), nullable=True),
        _created_at(),
    )

    op.create_table(
        'prize_payouts',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('prize_label', sa.String(255), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.CheckConstraint('amount > 0', name='check_prize_amount_positive'),
    )
    op.create_index('ix_prize_payouts_user_id', 'prize_payouts', ['user_id'])
    op.create_index('ix_prize_payouts_status', 'prize_payouts', ['status'])

    # Partners and finance
    op.create_table(
        'partners',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('percentage', PERCENT, nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_owner', sa.Boolean(), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_handle', sa.String(255), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            'percentage >= 0 AND percentage <= 100',
            name='check_partner_percentage_range',
        ),
    )

    op.create_table(
        'partner_transactions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'partner_id',
            sa.Integer(),
            sa.ForeignKey('partners.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_handle', sa.String(255), nullable=True),
        sa.Column('confirmation_number', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        _created_at(),
        sa.CheckConstraint(
            'amount > 0', name='check_partner_transaction_amount_positive'
        ),
        sa.CheckConstraint(
            "type IN ('allocation', 'withdrawal')",
            name='check_partner_transaction_type',
        ),
    )
    op.create_index(
        'idx_partner_transactions_partner_type',
        'partner_transactions',
        ['partner_id', 'type'],
    )

    op.create_table(
        'finance_allocations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('percentage', PERCENT, nullable=False),
        sa.Column('is_auto_calculated', sa.Boolean(), nullable=False),
        _created_at(),
    )

    op.create_table(
        'expenses',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('incurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('amount >= 0', name='check_expense_amount_non_negative'),
    )

    op.create_table(
        'cash_position',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('starting_balance', MONEY, nullable=False),
        sa.Column('actual_balance', MONEY, nullable=True),
        sa.Column('last_verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'cash_reconciliations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('calculated_balance', MONEY, nullable=False),
        sa.Column('observed_balance', MONEY, nullable=False),
        sa.Column('difference', MONEY, nullable=False),
        sa.Column('previous_starting_balance', MONEY, nullable=False),
        sa.Column('new_starting_balance', MONEY, nullable=False),
        sa.Column('reconciled_by', sa.String(255), nullable=True),
        sa.Column('reconciled_at', sa.DateTime(timezone=True), nullable=False),
    )

    # Side tables
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('reference_id', sa.Integer(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        _created_at(),
    )
    op.create_index(
        'idx_notifications_user_read', 'notifications', ['user_id', 'is_read']
    )

    op.create_table(
        'admin_audit_log',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('actor', sa.String(255), nullable=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('table_name', sa.String(100), nullable=False),
        sa.Column('record_id', sa.Integer(), nullable=True),
        sa.Column(
            'new_value',
            sa.Text(),
            nullable=True,
            comment='JSON snapshot of the written values',
        ),
        sa.Column('description', sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index(
        'idx_admin_audit_log_table_record',
        'admin_audit_log',
        ['table_name', 'record_id'],
    )

    op.create_table(
        'app_settings',
        sa.Column('key', sa.String(100), primary_key=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables."""
    for table in (
        'app_settings',
        'admin_audit_log',
        'notifications',
        'cash_reconciliations',
        'cash_position',
        'expenses',
        'finance_allocations',
        'partner_transactions',
        'partners',
        'prize_payouts',
        'payout_reconciliations',
        'payout_history',
        'payout_queue',
        'matrix_slots',
        'matrix_entries',
        'ad_campaigns',
        'users',
    ):
        op.drop_table(table)
