"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates room, room_member, room_preference, trip and schedule tables.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "room",
        sa.Column("room_id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("destination", sa.Text(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
    )

    op.create_table(
        "room_member",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.BigInteger(), sa.ForeignKey("room.room_id"), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.UniqueConstraint("room_id", "user_id", name="uq_room_member"),
    )

    op.create_table(
        "room_preference",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.BigInteger(), sa.ForeignKey("room.room_id"), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("place_tag", sa.String(32), nullable=True),
    )
    op.create_index("idx_room_preference_room", "room_preference", ["room_id"])

    op.create_table(
        "trip",
        sa.Column("trip_id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("room_id", sa.BigInteger(), sa.ForeignKey("room.room_id"), nullable=False),
        sa.Column("destination", sa.Text(), nullable=False),
        sa.Column("version_status", sa.String(8), nullable=False),
        sa.Column("trip_status", sa.String(16), nullable=False),
        sa.Column("travel_mode", sa.String(16), nullable=True),
        sa.Column("budget", sa.Integer(), nullable=True),
        sa.Column("accommodation_cost_info", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("idx_trip_room_version", "trip", ["room_id", "version_status"])

    op.create_table(
        "schedule",
        sa.Column("schedule_id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("trip_id", sa.BigInteger(), sa.ForeignKey("trip.trip_id"), nullable=False),
        sa.Column("day_number", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("visit_order", sa.Integer(), nullable=False),
        sa.Column("place_name", sa.Text(), nullable=False),
        sa.Column("place_tag", sa.String(32), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("is_visit", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("arrival", sa.DateTime(), nullable=False),
        sa.Column("departure", sa.DateTime(), nullable=False),
        sa.Column("travel_time", sa.String(32), nullable=True),
        sa.Column("estimated_cost", sa.Integer(), nullable=True),
        sa.Column("cost_explanation", sa.Text(), nullable=True),
    )
    op.create_index(
        "idx_schedule_trip_day_order", "schedule", ["trip_id", "day_number", "visit_order"]
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_schedule_trip_day_order", table_name="schedule")
    op.drop_table("schedule")
    op.drop_index("idx_trip_room_version", table_name="trip")
    op.drop_table("trip")
    op.drop_index("idx_room_preference_room", table_name="room_preference")
    op.drop_table("room_preference")
    op.drop_table("room_member")
    op.drop_table("room")
