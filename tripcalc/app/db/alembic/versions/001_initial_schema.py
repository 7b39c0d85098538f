"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-18

Creates:
- org, user
- trip (calculator state as JSONB)
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create all tables."""
    # org table
    op.create_table(
        "org",
        sa.Column("org_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    )

    # user table
    op.create_table(
        "user",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("org_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["org.org_id"]),
        sa.UniqueConstraint("org_id", "email", name="uq_user_org_email"),
    )
    op.create_index("idx_user_org", "user", ["org_id"])

    # trip table
    op.create_table(
        "trip",
        sa.Column("trip_id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("org_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("travel_style", sa.Text(), server_default=sa.text("'midRange'"), nullable=False),
        sa.Column("calculator_state", postgresql.JSONB(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["org_id"], ["org.org_id"]),
        sa.ForeignKeyConstraint(["user_id"], ["user.user_id"]),
    )
    op.create_index("idx_trip_org_user", "trip", ["org_id", "user_id", "updated_at"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("idx_trip_org_user", table_name="trip")
    op.drop_table("trip")
    op.drop_index("idx_user_org", table_name="user")
    op.drop_table("user")
    op.drop_table("org")
