"""add_finance_transactions

Revision ID: 8b5e1c0d9a27
Revises: 3f9c2a7d1b84
Create Date: 2026-10-19 14:30:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b5e1c0d9a27'
down_revision: Union[str, Sequence[str], None] = '3f9c2a7d1b84'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema - manual income/expense entries."""
    op.create_table(
        'finance_transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column(
            'type',
            sa.Enum('income', 'expense', name='transaction_type_enum'),
            nullable=False,
        ),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column(
            'payment_mode',
            sa.Enum(
                'cash', 'card', 'upi', 'bank_transfer', 'cheque',
                name='transaction_payment_mode_enum',
            ),
            nullable=False,
        ),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_finance_transactions_type', 'finance_transactions', ['type'])
    op.create_index('ix_finance_transactions_date', 'finance_transactions', ['date'])


def downgrade() -> None:
    """Downgrade schema - drop manual income/expense entries."""
    op.drop_index('ix_finance_transactions_date', table_name='finance_transactions')
    op.drop_index('ix_finance_transactions_type', table_name='finance_transactions')
    op.drop_table('finance_transactions')
    for enum_name in ('transaction_payment_mode_enum', 'transaction_type_enum'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
