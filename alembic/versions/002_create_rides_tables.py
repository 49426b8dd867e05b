"""Create rides and ride_passengers tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-17 00:10:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create rides and the passenger link table."""
    op.create_table(
        "rides",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "driver_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("from_location", sa.Text(), nullable=False),
        sa.Column("to_location", sa.Text(), nullable=False),
        sa.Column("time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("car_description", sa.Text(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=False),
        sa.Column("seats_taken", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("filled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint("capacity >= 1", name="rides_capacity_check"),
        sa.CheckConstraint(
            "seats_taken >= 0 AND seats_taken <= capacity",
            name="rides_seats_taken_check",
        ),
        sa.CheckConstraint("price >= 0", name="rides_price_check"),
    )
    op.create_index("ix_rides_driver_id", "rides", ["driver_id"])
    op.create_index("ix_rides_route_time", "rides", ["from_location", "to_location", "time"])

    op.create_table(
        "ride_passengers",
        sa.Column(
            "ride_id",
            sa.Uuid(),
            sa.ForeignKey("rides.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "user_id",
            sa.Uuid(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "joined_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_ride_passengers_user_id", "ride_passengers", ["user_id"])


def downgrade() -> None:
    """Drop rides and the passenger link table."""
    op.drop_index("ix_ride_passengers_user_id", table_name="ride_passengers")
    op.drop_table("ride_passengers")
    op.drop_index("ix_rides_route_time", table_name="rides")
    op.drop_index("ix_rides_driver_id", table_name="rides")
    op.drop_table("rides")
