"""add_booking_slots_table

Revision ID: 3b7e1c9d2a10
Revises:
Create Date: 2025-06-20 14:12:31.402117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision: str = '3b7e1c9d2a10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa_inspect(bind)

    if 'booking_slots' not in inspector.get_table_names():
        op.create_table(
            'booking_slots',
            sa.Column('id', sa.UUID(), nullable=False),
            sa.Column('provider_uid', sa.String(length=128), nullable=False),
            sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('duration_minutes', sa.Integer(), nullable=False),
            sa.Column('invite_only', sa.Boolean(), nullable=False),
            sa.Column('allowed_uids', sa.JSON(), nullable=False),
            sa.Column('min_rank', sa.String(length=20), nullable=True),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('title', sa.String(length=255), nullable=True),
            sa.Column('description', sa.String(length=2000), nullable=True),
            sa.Column('price', sa.Float(), nullable=True),
            sa.Column('location', sa.String(length=255), nullable=True),
            sa.Column('max_participants', sa.Integer(), nullable=True),
            sa.Column('booked_by', sa.String(length=128), nullable=True),
            sa.Column('booked_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        _create_indexes(existing=set())
    else:
        # Table already exists, only add the missing indexes
        indexes = {idx['name'] for idx in inspector.get_indexes('booking_slots')}
        _create_indexes(existing=indexes)


def _create_indexes(existing: set) -> None:
    for column in ('id', 'provider_uid', 'scheduled_at', 'status', 'booked_by'):
        name = op.f(f'ix_booking_slots_{column}')
        if name not in existing:
            op.create_index(name, 'booking_slots', [column], unique=False)

    # Listing query: provider + status, ordered by start
    if 'ix_booking_slots_provider_status_time' not in existing:
        op.create_index(
            'ix_booking_slots_provider_status_time',
            'booking_slots',
            ['provider_uid', 'status', 'scheduled_at'],
            unique=False
        )

    # At most one booked slot per provider and start instant
    if 'uq_booking_slots_committed_start' not in existing:
        op.create_index(
            'uq_booking_slots_committed_start',
            'booking_slots',
            ['provider_uid', 'scheduled_at'],
            unique=True,
            postgresql_where=sa.text("status = 'booked'"),
            sqlite_where=sa.text("status = 'booked'"),
        )


def downgrade() -> None:
    op.drop_index('uq_booking_slots_committed_start', table_name='booking_slots')
    op.drop_index('ix_booking_slots_provider_status_time', table_name='booking_slots')
    op.drop_index(op.f('ix_booking_slots_booked_by'), table_name='booking_slots')
    op.drop_index(op.f('ix_booking_slots_status'), table_name='booking_slots')
    op.drop_index(op.f('ix_booking_slots_scheduled_at'), table_name='booking_slots')
    op.drop_index(op.f('ix_booking_slots_provider_uid'), table_name='booking_slots')
    op.drop_index(op.f('ix_booking_slots_id'), table_name='booking_slots')
    op.drop_table('booking_slots')
