"""Add event chat messages and read receipts

Revision ID: 8d2e6b4f0c13
Revises: 3c1f0e9a7b21
Create Date: 2026-10-19 15:40:07.552918

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '8d2e6b4f0c13'
down_revision: Union[str, None] = '3c1f0e9a7b21'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'event_messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('sender_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('content', sa.Text, nullable=False),
        sa.Column('sent_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('idx_message_event_sent', 'event_messages', ['event_id', 'sent_at'])

    op.create_table(
        'message_seen',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('message_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('event_messages.id'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('seen_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('message_id', 'user_id', name='uq_message_seen'),
    )


def downgrade() -> None:
    op.drop_table('message_seen')
    op.drop_index('idx_message_event_sent', table_name='event_messages')
    op.drop_table('event_messages')
