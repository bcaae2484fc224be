"""Initial migration: users, tasks, progress, runs, wallet, settings

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


user_status = sa.Enum('active', 'inactive', name='user_status')
progress_status = sa.Enum('locked', 'available', 'completed', name='progress_status')
task_run_status = sa.Enum('running', 'completed', 'expired', name='task_run_status')
wallet_transaction_type = sa.Enum('deposit', 'withdraw', name='wallet_transaction_type')
wallet_transaction_status = sa.Enum('pending', 'approved', 'rejected', name='wallet_transaction_status')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('points_balance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('status', user_status, nullable=False, server_default='active'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('email IS NOT NULL OR phone IS NOT NULL', name='users_contact_required'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_phone', 'users', ['phone'], unique=True)
    op.create_index('ix_users_is_admin', 'users', ['is_admin'])
    op.create_index('ix_users_status', 'users', ['status'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('reward_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('wait_seconds', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('LENGTH(TRIM(title)) > 0', name='tasks_title_not_empty'),
        sa.CheckConstraint('order_index > 0', name='tasks_order_index_check'),
        sa.CheckConstraint('reward_points >= 0', name='tasks_reward_check'),
        sa.CheckConstraint('wait_seconds >= 1', name='tasks_wait_check'),
    )
    op.create_index('ix_tasks_order_index', 'tasks', ['order_index'], unique=True)
    op.create_index('ix_tasks_is_active', 'tasks', ['is_active'])

    op.create_table(
        'user_task_progress',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('task_id', sa.Integer(), nullable=False),
        sa.Column('status', progress_status, nullable=False, server_default='locked'),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('earned_points', sa.Integer(), nullable=False, server_default='0'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'task_id', name='uq_user_task_progress_pair'),
    )
    op.create_index('ix_user_task_progress_user_id', 'user_task_progress', ['user_id'])
    op.create_index('ix_user_task_progress_task_id', 'user_task_progress', ['task_id'])

    op.create_table(
        'task_runs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('task_id', sa.Integer(), nullable=False),
        sa.Column('run_token', sa.String(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expected_finish_ms', sa.BigInteger(), nullable=False),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', task_run_status, nullable=False, server_default='running'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['task_id'], ['tasks.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('run_token'),
    )
    op.create_index('ix_task_runs_user_id', 'task_runs', ['user_id'])
    op.create_index('ix_task_runs_task_id', 'task_runs', ['task_id'])
    op.create_index('idx_task_runs_user_status', 'task_runs', ['user_id', 'status'])

    op.create_table(
        'wallet_transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', wallet_transaction_type, nullable=False),
        sa.Column('amount_usd', sa.Float(), nullable=False),
        sa.Column('rate_usd_to_points', sa.Integer(), nullable=False),
        sa.Column('points_delta', sa.Integer(), nullable=False),
        sa.Column('status', wallet_transaction_status, nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processed_by', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['processed_by'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount_usd > 0', name='wallet_transactions_amount_check'),
        sa.CheckConstraint('rate_usd_to_points > 0', name='wallet_transactions_rate_check'),
    )
    op.create_index('ix_wallet_transactions_user_id', 'wallet_transactions', ['user_id'])
    op.create_index('ix_wallet_transactions_status', 'wallet_transactions', ['status'])
    op.create_index('ix_wallet_transactions_created_at', 'wallet_transactions', ['created_at'])
    op.create_index('idx_wallet_transactions_user_created', 'wallet_transactions', ['user_id', 'created_at'])

    op.create_table(
        'platform_settings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('app_name', sa.String(), nullable=False),
        sa.Column('usd_to_points', sa.Integer(), nullable=False),
        sa.Column('min_deposit_usd', sa.Float(), nullable=False),
        sa.Column('min_withdraw_usd', sa.Float(), nullable=False),
        sa.Column('manager_title', sa.String(), nullable=True),
        sa.Column('manager_whatsapp', sa.String(), nullable=True),
        sa.Column('manager_telegram', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('usd_to_points > 0', name='platform_settings_rate_check'),
        sa.CheckConstraint('min_deposit_usd > 0', name='platform_settings_min_deposit_check'),
        sa.CheckConstraint('min_withdraw_usd > 0', name='platform_settings_min_withdraw_check'),
    )

    op.create_table(
        'points_log',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('reason', sa.String(), nullable=False),
        sa.Column('reference_id', sa.String(), nullable=True),
        sa.Column('awarded_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_points_log_user_id', 'points_log', ['user_id'])
    op.create_index('ix_points_log_awarded_at', 'points_log', ['awarded_at'])


def downgrade() -> None:
    op.drop_table('points_log')
    op.drop_table('platform_settings')
    op.drop_table('wallet_transactions')
    op.drop_table('task_runs')
    op.drop_table('user_task_progress')
    op.drop_table('tasks')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (
        wallet_transaction_status, wallet_transaction_type, task_run_status, progress_status, user_status
    ):
        enum_type.drop(bind, checkfirst=True)
