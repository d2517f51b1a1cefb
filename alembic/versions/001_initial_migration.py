"""Initial migration - niches, products, users and rate limit counters.

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create seller_goal enum
    seller_goal_enum = postgresql.ENUM(
        "DROPSHIP", "BRAND", "START_SMALL",
        name="sellergoal",
        create_type=False,
    )
    seller_goal_enum.create(op.get_bind(), checkfirst=True)

    # Create niches table
    op.create_table(
        "niches",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("synonyms", postgresql.JSON(), nullable=False, server_default="[]"),
        # Status
        sa.Column("active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("deleted", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Create products table
    op.create_table(
        "products",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        # Pricing (minor units)
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("cost_price", sa.Integer(), nullable=True),
        # Catalog placement
        sa.Column("niche_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("niches.id"), nullable=True, index=True),
        sa.Column("tags", postgresql.JSON(), nullable=False, server_default="[]"),
        # Media
        sa.Column("images", postgresql.JSON(), nullable=False, server_default="[]"),
        # Supplier info
        sa.Column("supplier_link", sa.String(1000), nullable=True),
        # Analytics
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("imports", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("conversions", sa.Integer(), nullable=False, server_default="0"),
        # Status
        sa.Column("active", sa.Boolean(), nullable=False, server_default="true"),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        # Onboarding
        sa.Column("onboarding_niche_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("niches.id"), nullable=True),
        sa.Column(
            "onboarding_goal",
            postgresql.ENUM("DROPSHIP", "BRAND", "START_SMALL", name="sellergoal", create_type=False),
            nullable=True,
        ),
        # Timestamps
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Create rate_limit_counters table
    op.create_table(
        "rate_limit_counters",
        sa.Column("key", sa.String(255), primary_key=True),
        sa.Column("window_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("count", sa.Integer(), nullable=False, server_default="0"),
    )


def downgrade() -> None:
    op.drop_table("rate_limit_counters")
    op.drop_table("users")
    op.drop_table("products")
    op.drop_table("niches")

    # Drop enums
    op.execute("DROP TYPE IF EXISTS sellergoal")
