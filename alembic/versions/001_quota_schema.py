"""Quota and usage log schema

Revision ID: 001
Revises: 
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create quota tables."""

    op.create_table(
        'user_quotas',
        sa.Column('user_address', sa.String(128), nullable=False),
        sa.Column('monthly_cap', sa.Numeric(18, 6), nullable=False),
        sa.Column('current_usage', sa.Numeric(18, 6), nullable=False, server_default='0'),
        sa.Column('last_reset_date', sa.DateTime(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('user_address', name='pk_user_quotas'),
    )

    op.create_table(
        'usage_logs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_address', sa.String(128), nullable=False),
        sa.Column('amount', sa.Numeric(18, 6), nullable=False),
        sa.Column('currency', sa.String(16), nullable=False, server_default='USD'),
        sa.Column('task_id', sa.String(255), nullable=True),
        sa.Column('tx_hash', sa.String(255), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_usage_logs'),
    )

    op.create_index('ix_usage_logs_user_address', 'usage_logs', ['user_address'])
    op.create_index('ix_usage_logs_task_id', 'usage_logs', ['task_id'])
    op.create_index('ix_usage_logs_user_timestamp', 'usage_logs', ['user_address', 'timestamp'])


def downgrade() -> None:
    """Drop quota tables."""

    op.drop_index('ix_usage_logs_user_timestamp', table_name='usage_logs')
    op.drop_index('ix_usage_logs_task_id', table_name='usage_logs')
    op.drop_index('ix_usage_logs_user_address', table_name='usage_logs')
    op.drop_table('usage_logs')
    op.drop_table('user_quotas')
