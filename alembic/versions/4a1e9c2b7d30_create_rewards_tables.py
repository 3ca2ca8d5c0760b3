"""create_rewards_tables

Revision ID: 4a1e9c2b7d30
Revises:
Create Date: 2026-10-18 10:12:41.502117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4a1e9c2b7d30'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'merchants',
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('mcc_code', sa.String(length=4), nullable=True),
        sa.Column('is_online', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_merchants_name', 'merchants', ['name'])

    op.create_table(
        'payment_methods',
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False, server_default='card'),
        sa.Column('issuer', sa.String(length=100), nullable=True),
        sa.Column('product', sa.String(length=100), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='SGD'),
        sa.Column('base_rate', sa.Numeric(10, 4), nullable=False, server_default='1'),
        sa.Column('reward_rules', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('statement_day', sa.Integer(), nullable=True),
        sa.Column('use_statement_month', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('selected_categories', sa.JSON(), nullable=False, server_default='[]'),
        sa.Column('points_currency', sa.String(length=50), nullable=False, server_default='points'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('statement_day BETWEEN 1 AND 31', name='ck_payment_methods_statement_day'),
    )

    op.create_table(
        'transactions',
        sa.Column('merchant_id', sa.Uuid(), nullable=True),
        sa.Column('payment_method_id', sa.Uuid(), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='SGD'),
        sa.Column('payment_amount', sa.Numeric(14, 2), nullable=True),
        sa.Column('payment_currency', sa.String(length=3), nullable=True),
        sa.Column('is_online', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_contactless', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('user_category', sa.String(length=100), nullable=True),
        sa.Column('is_recategorized', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('auto_category_confidence', sa.Float(), nullable=True),
        sa.Column('needs_review', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('category_suggestion_reason', sa.String(length=255), nullable=True),
        sa.Column('base_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('bonus_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('points_provisional', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['merchant_id'], ['merchants.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['payment_method_id'], ['payment_methods.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_transactions_merchant_id', 'transactions', ['merchant_id'])
    op.create_index('ix_transactions_payment_method_id', 'transactions', ['payment_method_id'])
    op.create_index('ix_transactions_occurred_at', 'transactions', ['occurred_at'])
    op.create_index('ix_transactions_category', 'transactions', ['category'])
    op.create_index(
        'ix_transactions_payment_method_id_occurred_at',
        'transactions',
        ['payment_method_id', 'occurred_at'],
    )

    # Append-only: rows are never updated or deleted by the application
    op.create_table(
        'bonus_points_movements',
        sa.Column('transaction_id', sa.Uuid(), nullable=False),
        sa.Column('payment_method_id', sa.Uuid(), nullable=False),
        sa.Column('bonus_points', sa.Integer(), nullable=False),
        sa.Column('occurred_at', sa.DateTime(timezone=True), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(['transaction_id'], ['transactions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['payment_method_id'], ['payment_methods.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bonus_points_movements_transaction_id', 'bonus_points_movements', ['transaction_id'])
    op.create_index(
        'ix_bonus_points_movements_payment_method_id_occurred_at',
        'bonus_points_movements',
        ['payment_method_id', 'occurred_at'],
    )


def downgrade() -> None:
    op.drop_index('ix_bonus_points_movements_payment_method_id_occurred_at', table_name='bonus_points_movements')
    op.drop_index('ix_bonus_points_movements_transaction_id', table_name='bonus_points_movements')
    op.drop_table('bonus_points_movements')

    op.drop_index('ix_transactions_payment_method_id_occurred_at', table_name='transactions')
    op.drop_index('ix_transactions_category', table_name='transactions')
    op.drop_index('ix_transactions_occurred_at', table_name='transactions')
    op.drop_index('ix_transactions_payment_method_id', table_name='transactions')
    op.drop_index('ix_transactions_merchant_id', table_name='transactions')
    op.drop_table('transactions')

    op.drop_table('payment_methods')

    op.drop_index('ix_merchants_name', table_name='merchants')
    op.drop_table('merchants')
