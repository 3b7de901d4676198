"""initial_schema

Revision ID: 3f9c2a7d1b84
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c2a7d1b84'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ts(name, nullable=True):
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    """Upgrade schema - members, payments, attendance and AI insight tables."""

    op.create_table(
        'sequence_counters',
        sa.Column('key', sa.String(length=64), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )

    op.create_table(
        'plans',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('features', sa.JSON(), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'trainers',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('trainer_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column(
            'role',
            sa.Enum('Management', 'Trainer', 'Support Staff', 'Other', name='trainer_role_enum'),
            nullable=True,
        ),
        sa.Column('specialization', sa.String(), nullable=True),
        sa.Column('base_salary', sa.Float(), nullable=True),
        sa.Column(
            'commission_type',
            sa.Enum('fixed', 'percentage', name='commission_type_enum'),
            nullable=True,
        ),
        sa.Column('commission_value', sa.Float(), nullable=True),
        sa.Column('day_off', sa.String(), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_trainers_trainer_id', 'trainers', ['trainer_id'], unique=True)
    op.create_index('ix_trainers_phone', 'trainers', ['phone'])

    op.create_table(
        'pt_plans',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('sessions', sa.Integer(), nullable=False),
        sa.Column('trainer_id', sa.Uuid(), nullable=True),
        sa.Column('specialization', sa.String(), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
        sa.ForeignKeyConstraint(['trainer_id'], ['trainers.id']),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'discounts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=False),
        sa.Column(
            'discount_type',
            sa.Enum('percentage', 'fixed', name='discount_type_enum'),
            nullable=False,
        ),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        _ts('created_at'),
        _ts('updated_at'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code')
    )

    op.create_table(
        'members',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('member_id', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('phone', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('plan_id', sa.Uuid(), nullable=True),
        sa.Column('trainer_id', sa.Uuid(), nullable=True),
        sa.Column('pt_plan_id', sa.Uuid(), nullable=True),
        sa.Column('discount_id', sa.Uuid(), nullable=True),
        _ts('join_date'),
        _ts('membership_start_date'),
        _ts('membership_end_date'),
        sa.Column('membership_cycle', sa.Integer(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('Active', 'Expired', 'Pending', name='member_status_enum'),
            nullable=True,
        ),
        sa.Column('total_plan_price', sa.Float(), nullable=False),
        sa.Column('admission_fee_amount', sa.Float(), nullable=False),
        sa.Column('total_paid', sa.Float(), nullable=False),
        sa.Column(
            'payment_status',
            sa.Enum('paid', 'partial', 'unpaid', name='member_payment_status_enum'),
            nullable=True,
        ),
        _ts('last_payment_date'),
        sa.Column('last_payment_amount', sa.Float(), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
        sa.ForeignKeyConstraint(['plan_id'], ['plans.id']),
        sa.ForeignKeyConstraint(['trainer_id'], ['trainers.id']),
        sa.ForeignKeyConstraint(['pt_plan_id'], ['pt_plans.id']),
        sa.ForeignKeyConstraint(['discount_id'], ['discounts.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_members_member_id', 'members', ['member_id'], unique=True)
    op.create_index('ix_members_name', 'members', ['name'])
    op.create_index('ix_members_phone', 'members', ['phone'])
    op.create_index('ix_members_trainer_id', 'members', ['trainer_id'])
    op.create_index('ix_members_status', 'members', ['status'])
    op.create_index('ix_members_payment_status', 'members', ['payment_status'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('receipt_number', sa.String(), nullable=False),
        sa.Column('member_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        _ts('payment_date', nullable=False),
        sa.Column(
            'payment_mode',
            sa.Enum('cash', 'card', 'upi', 'bank_transfer', 'cheque', name='payment_mode_enum'),
            nullable=False,
        ),
        sa.Column(
            'payment_category',
            sa.Enum(
                'Plan', 'Trainer', 'Admission Fee', 'Due Amount', 'Other',
                name='payment_category_enum',
            ),
            nullable=False,
        ),
        sa.Column(
            'plan_type',
            sa.Enum('membership', 'pt_plan', name='plan_type_enum'),
            nullable=False,
        ),
        sa.Column('plan_id', sa.Uuid(), nullable=True),
        sa.Column(
            'membership_action',
            sa.Enum('new', 'renewal', 'none', name='membership_action_enum'),
            nullable=False,
        ),
        sa.Column(
            'payment_status',
            sa.Enum('completed', 'pending', 'failed', name='payment_record_status_enum'),
            nullable=False,
        ),
        sa.Column('membership_cycle', sa.Integer(), nullable=False),
        sa.Column('plan_price', sa.Float(), nullable=False),
        sa.Column('transaction_id', sa.String(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        _ts('created_at'),
        _ts('updated_at'),
        sa.ForeignKeyConstraint(['member_id'], ['members.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_payments_receipt_number', 'payments', ['receipt_number'], unique=True)
    op.create_index('ix_payments_member_id', 'payments', ['member_id'])
    op.create_index('ix_payments_payment_date', 'payments', ['payment_date'])
    op.create_index('ix_payments_member_cycle', 'payments', ['member_id', 'membership_cycle'])

    op.create_table(
        'trainer_payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('trainer_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('base_salary', sa.Float(), nullable=False),
        sa.Column('commission_amount', sa.Float(), nullable=False),
        sa.Column('month', sa.String(length=16), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        _ts('payment_date'),
        sa.Column(
            'payment_mode',
            sa.Enum(
                'cash', 'card', 'upi', 'bank_transfer', 'cheque',
                name='trainer_payment_mode_enum',
            ),
            nullable=False,
        ),
        sa.Column(
            'status',
            sa.Enum('paid', 'pending', name='trainer_payment_status_enum'),
            nullable=False,
        ),
        sa.Column('notes', sa.Text(), nullable=False),
        _ts('created_at'),
        sa.ForeignKeyConstraint(['trainer_id'], ['trainers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_trainer_payments_trainer_id', 'trainer_payments', ['trainer_id'])

    op.create_table(
        'attendance',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column(
            'user_type',
            sa.Enum('Member', 'Trainer', name='attendance_user_type_enum'),
            nullable=False,
        ),
        _ts('check_in_time', nullable=False),
        _ts('check_out_time'),
        sa.Column(
            'status',
            sa.Enum('checked-in', 'checked-out', name='attendance_status_enum'),
            nullable=False,
        ),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('check_in_photo', sa.String(), nullable=True),
        sa.Column('check_out_photo', sa.String(), nullable=True),
        sa.Column('notes', sa.String(), nullable=False),
        _ts('created_at'),
        _ts('updated_at'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_attendance_date', 'attendance', ['date'])
    op.create_index('ix_attendance_user_date', 'attendance', ['user_id', 'date'])
    op.create_index('ix_attendance_type_status', 'attendance', ['user_type', 'status'])
    op.create_index(
        'uq_attendance_active_user',
        'attendance',
        ['user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'checked-in'"),
        sqlite_where=sa.text("status = 'checked-in'"),
    )

    op.create_table(
        'trainer_attendance',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('trainer_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        _ts('check_in'),
        _ts('check_out'),
        sa.Column(
            'status',
            sa.Enum('present', 'leave', name='trainer_attendance_status_enum'),
            nullable=False,
        ),
        sa.Column('check_in_photo', sa.String(), nullable=True),
        sa.Column('check_out_photo', sa.String(), nullable=True),
        _ts('created_at'),
        _ts('updated_at'),
        sa.ForeignKeyConstraint(['trainer_id'], ['trainers.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('trainer_id', 'date', name='uq_trainer_attendance_day')
    )
    op.create_index('ix_trainer_attendance_trainer_id', 'trainer_attendance', ['trainer_id'])

    op.create_table(
        'ai_insights',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('kind', sa.String(length=50), nullable=False),
        sa.Column('months', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False),
        sa.Column('model_name', sa.String(length=100), nullable=True),
        sa.Column('input_summary', sa.JSON(), nullable=False),
        sa.Column('output_data', sa.JSON(), nullable=False),
        sa.Column('latency_ms', sa.Integer(), nullable=True),
        sa.Column('input_tokens', sa.Integer(), nullable=True),
        sa.Column('output_tokens', sa.Integer(), nullable=True),
        sa.Column('requested_by', sa.Text(), nullable=True),
        _ts('created_at'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ai_insights_kind_months', 'ai_insights', ['kind', 'months'])
    op.create_index('ix_ai_insights_created_at', 'ai_insights', ['created_at'])


def downgrade() -> None:
    """Downgrade schema - drop every table and enum type."""
    op.drop_table('ai_insights')
    op.drop_table('trainer_attendance')
    op.drop_index('uq_attendance_active_user', table_name='attendance')
    op.drop_table('attendance')
    op.drop_table('trainer_payments')
    op.drop_table('payments')
    op.drop_table('members')
    op.drop_table('discounts')
    op.drop_table('pt_plans')
    op.drop_table('trainers')
    op.drop_table('plans')
    op.drop_table('sequence_counters')

    for enum_name in (
        'trainer_attendance_status_enum',
        'attendance_status_enum',
        'attendance_user_type_enum',
        'trainer_payment_status_enum',
        'trainer_payment_mode_enum',
        'payment_record_status_enum',
        'membership_action_enum',
        'plan_type_enum',
        'payment_category_enum',
        'payment_mode_enum',
        'member_payment_status_enum',
        'member_status_enum',
        'discount_type_enum',
        'commission_type_enum',
        'trainer_role_enum',
    ):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
