"""direct messages

Revision ID: 0001
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = '0001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('username', sa.String(150), nullable=True),
        sa.Column('name', sa.String(150), nullable=False),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('role', sa.String(50), nullable=True),
        sa.Column('inbox_enabled', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table('dm_conversations',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_low_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_high_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('last_message_id', sa.Integer, nullable=True),
        sa.Column('last_activity_time', sa.BigInteger, nullable=False),
        sa.Column('creation_time', sa.BigInteger, nullable=False),
        sa.UniqueConstraint('user_low_id', 'user_high_id', name='uix_dm_conversation_pair'),
        sa.CheckConstraint('user_low_id < user_high_id', name='ck_dm_conversation_order'),
    )
    op.create_index('ix_dm_conversations_low_activity', 'dm_conversations', ['user_low_id', 'last_activity_time'])
    op.create_index('ix_dm_conversations_high_activity', 'dm_conversations', ['user_high_id', 'last_activity_time'])

    op.create_table('dm_messages',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('conversation_id', sa.Integer, sa.ForeignKey('dm_conversations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('parent_message_id', sa.Integer, sa.ForeignKey('dm_messages.id', ondelete='SET NULL'), nullable=True),
        sa.Column('creation_time', sa.BigInteger, nullable=False),
    )
    op.create_index('ix_dm_messages_sender_id', 'dm_messages', ['sender_id'])
    op.create_index('ix_dm_messages_conversation_time', 'dm_messages', ['conversation_id', 'creation_time'])

    op.create_table('dm_message_hides',
        sa.Column('message_id', sa.Integer, sa.ForeignKey('dm_messages.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_dm_message_hides_user_id', 'dm_message_hides', ['user_id'])

    op.create_table('dm_deleted_conversations',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('conversation_id', sa.Integer, sa.ForeignKey('dm_conversations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('conversation_id', 'user_id', name='uix_dm_deleted_conversation_user'),
    )
    op.create_index('ix_dm_deleted_conversations_user_id', 'dm_deleted_conversations', ['user_id'])

    op.create_table('dm_reads',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('conversation_id', sa.Integer, sa.ForeignKey('dm_conversations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('last_read_time', sa.BigInteger, nullable=False),
        sa.UniqueConstraint('conversation_id', 'user_id', name='uix_dm_read_conversation_user'),
    )
    op.create_index('ix_dm_reads_user_id', 'dm_reads', ['user_id'])

    op.create_table('dm_rate_limits',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('recipient_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('limit_type', sa.String(32), nullable=False),
        sa.Column('window_start', sa.BigInteger, nullable=False),
        sa.Column('message_count', sa.Integer, nullable=False),
    )
    op.create_index('ix_dm_rate_limits_user_recipient_window', 'dm_rate_limits', ['user_id', 'recipient_id', 'window_start'])
    op.create_index('ix_dm_rate_limits_user_type_window', 'dm_rate_limits', ['user_id', 'limit_type', 'window_start'])

    op.create_table('alerts',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('recipient_user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('actor_user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_alerts_recipient_user_id', 'alerts', ['recipient_user_id'])

    op.create_table('dm_reports',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('reporter_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reported_user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('conversation_id', sa.Integer, sa.ForeignKey('dm_conversations.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message_id', sa.Integer, sa.ForeignKey('dm_messages.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('status', sa.String(32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_dm_reports_reported_user_id', 'dm_reports', ['reported_user_id'])

    op.create_table('blocked_users',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('blocker_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('blocked_user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('blocker_id', 'blocked_user_id', name='uix_blocker_blocked'),
    )

    op.create_table('dm_reactions',
        sa.Column('id', sa.Integer, primary_key=True),
        sa.Column('message_id', sa.Integer, sa.ForeignKey('dm_messages.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('emoji', sa.String(16), nullable=False),
        sa.UniqueConstraint('user_id', 'message_id', name='uix_dm_reaction_user_message'),
    )
    op.create_index('ix_dm_reactions_message_id', 'dm_reactions', ['message_id'])


def downgrade():
    op.drop_table('dm_reactions')
    op.drop_table('blocked_users')
    op.drop_table('dm_reports')
    op.drop_table('alerts')
    op.drop_table('dm_rate_limits')
    op.drop_table('dm_reads')
    op.drop_table('dm_deleted_conversations')
    op.drop_table('dm_message_hides')
    op.drop_table('dm_messages')
    op.drop_table('dm_conversations')
    op.drop_table('users')
