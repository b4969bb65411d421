"""Initial database schema.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

Creates the tables for the booking engine:
- Resources (ledger, maintained by the catalog service)
- Bookings (admission, lifecycle and expiry)
"""

from typing import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all database tables."""

    # ==================== RESOURCES ====================
    op.create_table(
        "resources",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("name", sa.String(200), nullable=False, index=True),
        sa.Column("description", sa.Text),
        sa.Column("location", sa.String(255)),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("price", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("capacity > 0", name="check_resource_capacity_positive"),
        sa.CheckConstraint("price >= 0", name="check_resource_price_non_negative"),
    )

    # ==================== BOOKINGS ====================
    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("resource_id", sa.Uuid, sa.ForeignKey("resources.id"), nullable=False, index=True),
        sa.Column("user_id", sa.Uuid, nullable=False, index=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("slots", sa.Integer, nullable=False, server_default="1"),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("price_at_booking", sa.Integer, nullable=False),
        sa.Column("total_amount", sa.Integer, nullable=False),
        sa.Column("payment_at", sa.DateTime(timezone=True)),
        sa.Column("expired_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("slots > 0", name="check_booking_slots_positive"),
        sa.CheckConstraint("start_time < end_time", name="check_booking_window"),
    )

    # Overlap aggregate during admission
    op.create_index(
        "ix_bookings_overlap",
        "bookings",
        ["resource_id", "status", "start_time", "end_time"],
    )
    # Expiry sweeps
    op.create_index("ix_bookings_status_expired_at", "bookings", ["status", "expired_at"])
    op.create_index("ix_bookings_status_end_time", "bookings", ["status", "end_time"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_bookings_status_end_time", table_name="bookings")
    op.drop_index("ix_bookings_status_expired_at", table_name="bookings")
    op.drop_index("ix_bookings_overlap", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("resources")
