"""Initial EventCircle schema

Revision ID: 3c1f0e9a7b21
Revises:
Create Date: 2026-10-19 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3c1f0e9a7b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


EVENT_CATEGORIES = ('SOCIAL', 'EDUCATION', 'BUSINESS', 'ENTERTAINMENT', 'OTHER')
PARTICIPATION_STATUSES = ('PENDING', 'ACCEPTED', 'DENIED', 'INVITED')
RSVP_RESPONSES = ('PENDING', 'ACCEPTED', 'DENIED')
NOTIFICATION_TYPES = (
    'INVITATION', 'RSVP_ACCEPT', 'RSVP_DENIED', 'REQUEST_JOIN', 'REQUEST_ACCEPT',
    'REQUEST_DENIED', 'REPLY', 'COMMENT', 'NEW_POST', 'UPDATE_EVENT', 'DELETE_EVENT',
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('bio', sa.Text, nullable=True),
        sa.Column('avatar_url', sa.String(512), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'events',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(100), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('category', sa.Enum(*EVENT_CATEGORIES, name='eventcategory'), nullable=False, server_default='OTHER'),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('images', sa.JSON, nullable=False, server_default='[]'),
        sa.Column('capacity', sa.Integer, nullable=True, server_default='0'),
        sa.Column('organizer_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('is_public', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('is_open', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('idx_event_starts_at', 'events', ['starts_at'])
    op.create_index('idx_event_organizer', 'events', ['organizer_id'])
    op.create_index('idx_event_created_at', 'events', ['created_at'])
    op.create_index('idx_event_category', 'events', ['category'])

    op.create_table(
        'event_participants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('status', sa.Enum(*PARTICIPATION_STATUSES, name='participationstatus'), nullable=False, server_default='PENDING'),
        sa.Column('invited_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_participant'),
    )
    op.create_index('idx_participant_user', 'event_participants', ['user_id'])
    op.create_index('idx_participant_event_status', 'event_participants', ['event_id', 'status'])

    op.create_table(
        'invitations',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('invitor_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('invitee_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text, nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        'uq_live_invitation_event_invitee', 'invitations', ['event_id', 'invitee_id'],
        unique=True, postgresql_where=sa.text('is_deleted = false'),
    )
    op.create_index('idx_invitation_invitee', 'invitations', ['invitee_id'])
    op.create_index('idx_invitation_invitor', 'invitations', ['invitor_id'])

    op.create_table(
        'rsvps',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('invitation_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('invitations.id'), nullable=False),
        sa.Column('response', sa.Enum(*RSVP_RESPONSES, name='rsvpresponse'), nullable=False, server_default='PENDING'),
        sa.Column('responded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        'uq_live_rsvp_invitation', 'rsvps', ['invitation_id'],
        unique=True, postgresql_where=sa.text('is_deleted = false'),
    )

    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('type', sa.Enum(*NOTIFICATION_TYPES, name='notificationtype'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_notification_type', 'notifications', ['type'])

    op.create_table(
        'user_notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('notification_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('notifications.id'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('is_read', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.UniqueConstraint('notification_id', 'user_id', name='uq_user_notification'),
    )
    op.create_index('idx_user_notification_user', 'user_notifications', ['user_id', 'is_read'])

    op.create_table(
        'discussion_posts',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('author_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('images', sa.JSON, nullable=False, server_default='[]'),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('idx_post_event_created', 'discussion_posts', ['event_id', 'created_at'])

    op.create_table(
        'discussion_replies',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('post_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('discussion_posts.id'), nullable=False),
        sa.Column('author_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('is_deleted', sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('idx_reply_post_created', 'discussion_replies', ['post_id', 'created_at'])


def downgrade() -> None:
    op.drop_table('discussion_replies')
    op.drop_table('discussion_posts')
    op.drop_table('user_notifications')
    op.drop_table('notifications')
    op.drop_table('rsvps')
    op.drop_table('invitations')
    op.drop_table('event_participants')
    op.drop_table('events')
    op.drop_table('users')

    # Drop enums
    for name in ('notificationtype', 'rsvpresponse', 'participationstatus', 'eventcategory'):
        postgresql.ENUM(name=name).drop(op.get_bind(), checkfirst=True)
