"""initial finance schema: users, expenses, goals, goal contributions

Revision ID: 20261018_initial
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261018_initial'
down_revision = None
branch_labels = None
depends_on = None

EXPENSE_CATEGORIES = (
    'Food & Dining', 'Transportation', 'Shopping', 'Entertainment', 'Bills & Utilities',
    'Healthcare', 'Education', 'Travel', 'Groceries', 'Housing', 'Insurance',
    'Gifts & Donations', 'Personal Care', 'Business', 'Other',
)
PAYMENT_METHODS = ('Cash', 'Credit Card', 'Debit Card', 'Bank Transfer', 'Digital Wallet', 'Check')
GOAL_CATEGORIES = (
    'Emergency Fund', 'Vacation', 'Car', 'House', 'Education', 'Retirement',
    'Wedding', 'Medical', 'Business', 'Electronics', 'Other',
)
GOAL_PRIORITIES = ('Low', 'Medium', 'High')
GOAL_STATUSES = ('Active', 'Completed', 'Paused', 'Cancelled')


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('hashed_password', sa.String(length=1024), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_superuser', sa.Boolean(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('full_name', sa.String(length=100), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('monthly_budget', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'expenses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('category', sa.Enum(*EXPENSE_CATEGORIES, name='expense_category'), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('payment_method', sa.Enum(*PAYMENT_METHODS, name='payment_method'), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('recurring', sa.JSON(), nullable=False),
        sa.Column('receipt', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_expenses_user_id', 'expenses', ['user_id'])
    op.create_index('ix_expenses_date', 'expenses', ['date'])

    op.create_table(
        'goals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('target_amount', sa.Float(), nullable=False),
        sa.Column('current_amount', sa.Float(), nullable=False),
        sa.Column('target_date', sa.DateTime(), nullable=False),
        sa.Column('category', sa.Enum(*GOAL_CATEGORIES, name='goal_category'), nullable=False),
        sa.Column('priority', sa.Enum(*GOAL_PRIORITIES, name='goal_priority'), nullable=False),
        sa.Column('status', sa.Enum(*GOAL_STATUSES, name='goal_status'), nullable=False),
        sa.Column('auto_contribute', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_goals_user_id', 'goals', ['user_id'])
    op.create_index('ix_goals_status', 'goals', ['status'])

    op.create_table(
        'goal_contributions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('goal_id', sa.Uuid(), sa.ForeignKey('goals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('note', sa.String(length=200), nullable=False),
    )
    op.create_index('ix_goal_contributions_goal_id', 'goal_contributions', ['goal_id'])


def downgrade():
    op.drop_table('goal_contributions')
    op.drop_table('goals')
    op.drop_table('expenses')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    for enum_name in ('goal_status', 'goal_priority', 'goal_category', 'payment_method', 'expense_category'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
