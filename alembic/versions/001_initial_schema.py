"""initial ledger schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create world_state table
    op.create_table(
        'world_state',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('channel', sa.String(length=100), nullable=False),
        sa.Column('namespace', sa.String(length=100), nullable=False),
        sa.Column('key', sa.Text(), nullable=False),
        sa.Column('value', sa.LargeBinary(), nullable=False),
        sa.Column('version', sa.String(length=64), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('channel', 'namespace', 'key', name='uq_world_state_key')
    )
    op.create_index(op.f('ix_world_state_id'), 'world_state', ['id'], unique=False)

    # Create key_history table
    op.create_table(
        'key_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('channel', sa.String(length=100), nullable=False),
        sa.Column('namespace', sa.String(length=100), nullable=False),
        sa.Column('key', sa.Text(), nullable=False),
        sa.Column('tx_id', sa.String(length=64), nullable=False),
        sa.Column('value', sa.LargeBinary(), nullable=True),
        sa.Column('is_delete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_key_history_id'), 'key_history', ['id'], unique=False)
    op.create_index('idx_key_history_key', 'key_history', ['channel', 'namespace', 'key', 'id'], unique=False)

    # Create ledger_transactions table
    op.create_table(
        'ledger_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tx_id', sa.String(length=64), nullable=False),
        sa.Column('channel', sa.String(length=100), nullable=False),
        sa.Column('chaincode', sa.String(length=100), nullable=False),
        sa.Column('function', sa.String(length=100), nullable=False),
        sa.Column('creator_msp_id', sa.String(length=100), nullable=False),
        sa.Column('validation_code', sa.Enum('VALID', 'MVCC_READ_CONFLICT', name='validationcode'), nullable=False),
        sa.Column('committed_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_ledger_transactions_id'), 'ledger_transactions', ['id'], unique=False)
    op.create_index(op.f('ix_ledger_transactions_tx_id'), 'ledger_transactions', ['tx_id'], unique=True)
    op.create_index('idx_ledger_tx_committed', 'ledger_transactions', ['channel', 'committed_at'], unique=False)


def downgrade() -> None:
    # Drop tables in reverse order
    op.drop_index('idx_ledger_tx_committed', table_name='ledger_transactions')
    op.drop_index(op.f('ix_ledger_transactions_tx_id'), table_name='ledger_transactions')
    op.drop_index(op.f('ix_ledger_transactions_id'), table_name='ledger_transactions')
    op.drop_table('ledger_transactions')

    op.drop_index('idx_key_history_key', table_name='key_history')
    op.drop_index(op.f('ix_key_history_id'), table_name='key_history')
    op.drop_table('key_history')

    op.drop_index(op.f('ix_world_state_id'), table_name='world_state')
    op.drop_table('world_state')
