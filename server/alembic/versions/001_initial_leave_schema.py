"""Initial leave schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Profiles: provisioned by the user service, balance debited only by the leave engine
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', sa.Enum('employee', 'manager', name='profilerole'), nullable=False, server_default='employee'),
        sa.Column('leave_balance', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('leave_balance >= 0', name='ck_profiles_leave_balance_non_negative'),
    )
    op.create_index('idx_profiles_role', 'profiles', ['role'])

    # Leave types
    op.create_table(
        'leave_types',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False, unique=True),
        sa.Column('max_days', sa.Integer(), nullable=False, server_default='0'),
    )

    # Leave requests
    op.create_table(
        'leave_requests',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('leave_type_id', sa.Uuid(), sa.ForeignKey('leave_types.id'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('reason', sa.String(1000), nullable=True),
        sa.Column('attachment_url', sa.String(1000), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'approved', 'rejected', 'cancelled', name='leavestatus'),
            nullable=False,
            server_default='pending',
        ),
        sa.Column('reviewed_by', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=True),
        sa.Column('review_comment', sa.String(1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('end_date >= start_date', name='ck_leave_requests_date_range'),
    )
    op.create_index('ix_leave_requests_user_id', 'leave_requests', ['user_id'])
    op.create_index('idx_leave_requests_user_status', 'leave_requests', ['user_id', 'status'])
    op.create_index('idx_leave_requests_status_created', 'leave_requests', ['status', 'created_at'])

    # Audit logs
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('actor_user_id', sa.Uuid(), sa.ForeignKey('profiles.id'), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=True),
        sa.Column('metadata_json', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('idx_audit_logs_entity', 'audit_logs', ['entity_type', 'entity_id'])
    op.create_index('idx_audit_logs_actor', 'audit_logs', ['actor_user_id'])


def downgrade() -> None:
    op.drop_index('idx_audit_logs_actor', table_name='audit_logs')
    op.drop_index('idx_audit_logs_entity', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index('idx_leave_requests_status_created', table_name='leave_requests')
    op.drop_index('idx_leave_requests_user_status', table_name='leave_requests')
    op.drop_index('ix_leave_requests_user_id', table_name='leave_requests')
    op.drop_table('leave_requests')
    op.drop_table('leave_types')
    op.drop_index('idx_profiles_role', table_name='profiles')
    op.drop_table('profiles')
    sa.Enum(name='leavestatus').drop(op.get_bind(), checkfirst=True)
    sa.Enum(name='profilerole').drop(op.get_bind(), checkfirst=True)
