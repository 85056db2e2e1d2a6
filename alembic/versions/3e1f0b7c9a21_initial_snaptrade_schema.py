"""Initial SnapTrade ingestion schema

Revision ID: 3e1f0b7c9a21
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3e1f0b7c9a21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('display_name', sa.String(100), nullable=True),
        sa.Column('show_amounts', sa.Boolean(), nullable=True, server_default='0'),
        sa.Column('show_quantity', sa.Boolean(), nullable=True, server_default='0'),
        sa.Column('visibility', sa.String(20), nullable=True, server_default='public'),
        sa.Column('snaptrade_user_id', sa.String(100), nullable=True),
        sa.Column('snaptrade_user_secret', sa.String(255), nullable=True),
        sa.Column('snaptrade_created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_trade_sync_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_snaptrade_user_id', 'users', ['snaptrade_user_id'])

    op.create_table(
        'snaptrade_connections',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('snaptrade_connection_id', sa.String(100), nullable=False),
        sa.Column('user_id', sa.String(100), nullable=True),
        sa.Column('snaptrade_user_id', sa.String(100), nullable=True),
        sa.Column('brokerage_name', sa.String(100), nullable=True),
        sa.Column('brokerage_slug', sa.String(100), nullable=True),
        sa.Column('brokerage_logo_url', sa.String(500), nullable=True),
        sa.Column('connection_type', sa.String(20), nullable=False, server_default='read'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('disabled', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('disabled_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('connection_created_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('last_sync_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('raw_connection_data', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_snaptrade_connections_snaptrade_connection_id', 'snaptrade_connections', ['snaptrade_connection_id'], unique=True)
    op.create_index('ix_snaptrade_connections_user_id', 'snaptrade_connections', ['user_id'])
    op.create_index('ix_snaptrade_connections_snaptrade_user_id', 'snaptrade_connections', ['snaptrade_user_id'])

    op.create_table(
        'snaptrade_accounts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('snaptrade_account_id', sa.String(100), nullable=False),
        sa.Column('user_id', sa.String(100), nullable=True),
        sa.Column('snaptrade_user_id', sa.String(100), nullable=True),
        sa.Column('snaptrade_connection_id', sa.String(100), nullable=True),
        sa.Column('account_name', sa.String(255), nullable=True),
        sa.Column('account_number', sa.String(50), nullable=True),
        sa.Column('institution_name', sa.String(100), nullable=True),
        sa.Column('account_type', sa.String(50), nullable=True),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('balance_amount', sa.Numeric(28, 10), nullable=True),
        sa.Column('balance_currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('holdings_sync_completed', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('holdings_last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('transactions_sync_completed', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('transactions_last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('transactions_first_transaction_date', sa.Date(), nullable=True),
        sa.Column('raw_account_data', sa.JSON(), nullable=True),
        sa.Column('raw_balance_data', sa.JSON(), nullable=True),
        sa.Column('raw_sync_status', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_snaptrade_accounts_snaptrade_account_id', 'snaptrade_accounts', ['snaptrade_account_id'], unique=True)
    op.create_index('ix_snaptrade_accounts_user_id', 'snaptrade_accounts', ['user_id'])
    op.create_index('ix_snaptrade_accounts_snaptrade_user_id', 'snaptrade_accounts', ['snaptrade_user_id'])
    op.create_index('ix_snaptrade_accounts_snaptrade_connection_id', 'snaptrade_accounts', ['snaptrade_connection_id'])

    op.create_table(
        'snaptrade_activities',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('snaptrade_account_id', sa.String(100), nullable=False),
        sa.Column('snaptrade_activity_id', sa.String(100), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('activity_type', sa.String(50), nullable=False),
        sa.Column('symbol_ticker', sa.String(50), nullable=True),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('price', sa.Numeric(28, 10), nullable=False, server_default='0'),
        sa.Column('units', sa.Numeric(28, 10), nullable=False, server_default='0'),
        sa.Column('amount', sa.Numeric(28, 10), nullable=False, server_default='0'),
        sa.Column('fee', sa.Numeric(28, 10), nullable=False, server_default='0'),
        sa.Column('currency_code', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('trade_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('settlement_date', sa.Date(), nullable=True),
        sa.Column('institution', sa.String(100), nullable=True),
        sa.Column('external_reference_id', sa.String(100), nullable=True),
        sa.Column('sync_batch_id', sa.String(36), nullable=False),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('raw_activity_data', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.UniqueConstraint('snaptrade_account_id', 'snaptrade_activity_id', name='uq_snaptrade_activities_account_activity'),
    )
    op.create_index('ix_snaptrade_activities_snaptrade_account_id', 'snaptrade_activities', ['snaptrade_account_id'])
    op.create_index('ix_snaptrade_activities_user_id', 'snaptrade_activities', ['user_id'])
    op.create_index('ix_snaptrade_activities_activity_type', 'snaptrade_activities', ['activity_type'])
    op.create_index('ix_snaptrade_activities_symbol_ticker', 'snaptrade_activities', ['symbol_ticker'])
    op.create_index('ix_snaptrade_activities_trade_date', 'snaptrade_activities', ['trade_date'])
    op.create_index('ix_snaptrade_activities_external_reference_id', 'snaptrade_activities', ['external_reference_id'])
    op.create_index('ix_snaptrade_activities_sync_batch_id', 'snaptrade_activities', ['sync_batch_id'])

    op.create_table(
        'trades',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('symbol', sa.String(50), nullable=False),
        sa.Column('company_name', sa.String(255), nullable=True),
        sa.Column('asset_type', sa.String(20), nullable=False, server_default='stock'),
        sa.Column('trade_type', sa.String(10), nullable=False),
        sa.Column('quantity', sa.Numeric(28, 10), nullable=False),
        sa.Column('price', sa.Numeric(28, 10), nullable=False),
        sa.Column('total_value', sa.Numeric(28, 10), nullable=False),
        sa.Column('profit_loss', sa.Numeric(28, 10), nullable=True),
        sa.Column('profit_loss_percentage', sa.Numeric(10, 4), nullable=True),
        sa.Column('executed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('show_amounts', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('show_quantity', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('visibility', sa.String(20), nullable=False, server_default='public'),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default='1'),
        sa.Column('data_source', sa.String(20), nullable=False, server_default='snaptrade'),
        sa.Column('snaptrade_activity_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['snaptrade_activity_id'], ['snaptrade_activities.id']),
    )
    op.create_index('ix_trades_user_id', 'trades', ['user_id'])
    op.create_index('ix_trades_symbol', 'trades', ['symbol'])
    op.create_index('ix_trades_trade_type', 'trades', ['trade_type'])
    op.create_index('ix_trades_executed_at', 'trades', ['executed_at'])
    op.create_index('ix_trades_snaptrade_activity_id', 'trades', ['snaptrade_activity_id'], unique=True)


def downgrade() -> None:
    op.drop_table('trades')
    op.drop_table('snaptrade_activities')
    op.drop_table('snaptrade_accounts')
    op.drop_table('snaptrade_connections')
    op.drop_table('users')
