"""Initial event workflow schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

Creates:
- users: organizers and core members
- events: events, templates and their city instances
- tasks: work items of an event (one category each)
- graphics_tasks, logistics_tasks, outreach_tasks, sponsorship_tasks:
  specialized sub-records, at most one per task
- notifications: per-user notification history

Workflow enums are stored as VARCHAR. UUIDs are native on PostgreSQL and
16-byte binary on SQLite; JSON lists are JSONB on PostgreSQL.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


SUBTASK_TABLES = (
    'graphics_tasks',
    'logistics_tasks',
    'outreach_tasks',
    'sponsorship_tasks',
)


def _uuid_type(dialect: str):
    if dialect == 'postgresql':
        return postgresql.UUID(as_uuid=True)
    return sa.LargeBinary(16)


def _json_type(dialect: str):
    if dialect == 'postgresql':
        return postgresql.JSONB()
    return sa.JSON()


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def _subtask_columns(dialect: str):
    """Columns shared by every sub-record table."""
    return [
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('uuid', _uuid_type(dialect), nullable=False),
        sa.Column(
            'task_id',
            sa.Integer(),
            sa.ForeignKey('tasks.id', ondelete='CASCADE'),
            nullable=False,
            unique=True,
        ),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables and indexes."""
    dialect = op.get_bind().dialect.name

    # users
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('uuid', _uuid_type(dialect), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(30), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('preferences_json', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_uuid', 'users', ['uuid'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    # events
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('uuid', _uuid_type(dialect), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('is_template', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column(
            'parent_event_id',
            sa.Integer(),
            sa.ForeignKey('events.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column(
            'created_by_user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='SET NULL'),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index('ix_events_uuid', 'events', ['uuid'], unique=True)
    op.create_index('ix_events_date', 'events', ['date'])
    op.create_index('ix_events_status', 'events', ['status'])
    op.create_index('ix_events_parent_event_id', 'events', ['parent_event_id'])
    op.create_index('idx_events_parent_city', 'events', ['parent_event_id', 'city'])

    # tasks
    op.create_table(
        'tasks',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('uuid', _uuid_type(dialect), nullable=False),
        sa.Column(
            'event_id',
            sa.Integer(),
            sa.ForeignKey('events.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('category', sa.String(30), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('deadline', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('blocker_note', sa.Text(), nullable=True),
        sa.Column('status_changed_at', sa.DateTime(), nullable=False),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_tasks_uuid', 'tasks', ['uuid'], unique=True)
    op.create_index('ix_tasks_event_id', 'tasks', ['event_id'])
    op.create_index('ix_tasks_category', 'tasks', ['category'])
    op.create_index('ix_tasks_deadline', 'tasks', ['deadline'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])
    op.create_index('ix_tasks_owner_id', 'tasks', ['owner_id'])
    op.create_index('idx_tasks_status_deadline', 'tasks', ['status', 'deadline'])

    # Sub-records
    op.create_table(
        'graphics_tasks',
        *_subtask_columns(dialect),
        sa.Column('asset_type', sa.String(50), nullable=False),
        sa.Column('formats', _json_type(dialect), nullable=False),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('final_output_link', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'logistics_tasks',
        *_subtask_columns(dialect),
        sa.Column('status', sa.String(30), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'outreach_tasks',
        *_subtask_columns(dialect),
        sa.Column('channel', sa.String(50), nullable=False),
        sa.Column('content_link', sa.Text(), nullable=True),
        sa.Column('scheduled_time', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(30), nullable=False),
        sa.Column('outcome_note', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'sponsorship_tasks',
        *_subtask_columns(dialect),
        sa.Column('current_stage', sa.String(30), nullable=False),
        sa.Column('next_action', sa.Text(), nullable=True),
        sa.Column('follow_up_deadline', sa.DateTime(), nullable=True),
        sa.Column('status_history', _json_type(dialect), nullable=False),
        *_timestamps(),
    )

    for table in SUBTASK_TABLES:
        op.create_index(f'ix_{table}_uuid', table, ['uuid'], unique=True)
        op.create_index(f'ix_{table}_owner_id', table, ['owner_id'])

    # notifications
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('uuid', _uuid_type(dialect), nullable=False),
        sa.Column(
            'user_id',
            sa.Integer(),
            sa.ForeignKey('users.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column(
            'task_id',
            sa.Integer(),
            sa.ForeignKey('tasks.id', ondelete='CASCADE'),
            nullable=True,
        ),
        sa.Column(
            'event_id',
            sa.Integer(),
            sa.ForeignKey('events.id', ondelete='CASCADE'),
            nullable=True,
        ),
        sa.Column('category', sa.String(30), nullable=False),
        sa.Column('origin', sa.String(10), nullable=False),
        sa.Column('message', sa.String(500), nullable=False),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_notifications_uuid', 'notifications', ['uuid'], unique=True)
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_task_id', 'notifications', ['task_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])
    op.create_index(
        'ix_notifications_dedup',
        'notifications',
        ['user_id', 'task_id', 'category', 'created_at'],
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('notifications')
    for table in reversed(SUBTASK_TABLES):
        op.drop_table(table)
    op.drop_table('tasks')
    op.drop_table('events')
    op.drop_table('users')
