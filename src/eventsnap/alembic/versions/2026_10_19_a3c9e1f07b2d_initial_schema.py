"""initial schema

Revision ID: a3c9e1f07b2d
Revises:
Create Date: 2026-10-19 10:12:44.318205

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a3c9e1f07b2d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

photo_status = sa.Enum('pending', 'approved', 'rejected', name='photo_status')


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('public_event_id', sa.String(length=64), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('scheduled_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('allow_anonymous_upload', sa.Boolean(), nullable=False),
        sa.Column('require_approval', sa.Boolean(), nullable=False),
        sa.Column('max_photos_per_user', sa.Integer(), nullable=False),
        sa.Column('allowed_mime_types', sa.JSON(), nullable=False),
        sa.Column('max_file_size_bytes', sa.Integer(), nullable=False),
        sa.Column('total_photos', sa.Integer(), nullable=False),
        sa.Column('approved_photos', sa.Integer(), nullable=False),
        sa.Column('pending_photos', sa.Integer(), nullable=False),
        sa.Column('rejected_photos', sa.Integer(), nullable=False),
        sa.Column('total_views', sa.Integer(), nullable=False),
        sa.Column('qr_code_image', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_public_event_id', 'events', ['public_event_id'], unique=True)
    op.create_index('ix_events_scheduled_date', 'events', ['scheduled_date'])
    op.create_index('ix_events_owner_id', 'events', ['owner_id'])
    op.create_index('ix_events_created_at', 'events', ['created_at'])

    op.create_table(
        'event_hosts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('public_event_id', sa.String(length=64), nullable=False),
        sa.Column('event_title', sa.String(length=100), nullable=False),
        sa.Column('host_email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_event_hosts_public_event_id', 'event_hosts', ['public_event_id'], unique=True)
    # Not unique: one host may run several events
    op.create_index('ix_event_hosts_host_email', 'event_hosts', ['host_email'])

    op.create_table(
        'photos',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_id', sa.Uuid(), nullable=False),
        sa.Column('media_ref', sa.String(), nullable=False),
        sa.Column('thumbnail_ref', sa.String(), nullable=True),
        sa.Column('original_file_name', sa.String(length=255), nullable=False),
        sa.Column('mime_type', sa.String(length=100), nullable=False),
        sa.Column('byte_size', sa.Integer(), nullable=False),
        sa.Column('width', sa.Integer(), nullable=True),
        sa.Column('height', sa.Integer(), nullable=True),
        sa.Column('uploader_display_name', sa.String(length=100), nullable=False),
        sa.Column('uploader_email', sa.String(length=255), nullable=True),
        sa.Column('caption', sa.String(length=200), nullable=True),
        sa.Column('status', photo_status, nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=False),
        sa.Column('download_count', sa.Integer(), nullable=False),
        sa.Column('uploaded_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_photos_event_id', 'photos', ['event_id'])
    op.create_index('ix_photos_event_id_status', 'photos', ['event_id', 'status'])
    op.create_index('ix_photos_uploaded_at', 'photos', ['uploaded_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_photos_uploaded_at', table_name='photos')
    op.drop_index('ix_photos_event_id_status', table_name='photos')
    op.drop_index('ix_photos_event_id', table_name='photos')
    op.drop_table('photos')
    photo_status.drop(op.get_bind(), checkfirst=True)

    op.drop_index('ix_event_hosts_host_email', table_name='event_hosts')
    op.drop_index('ix_event_hosts_public_event_id', table_name='event_hosts')
    op.drop_table('event_hosts')

    op.drop_index('ix_events_created_at', table_name='events')
    op.drop_index('ix_events_owner_id', table_name='events')
    op.drop_index('ix_events_scheduled_date', table_name='events')
    op.drop_index('ix_events_public_event_id', table_name='events')
    op.drop_table('events')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
