"""Create competitor brand, product and facings tables

Revision ID: 002
Revises: 001
Create Date: 2024-02-01 00:00:00.000000+00:00

What:  Adds competitor_brands, competitor_products and competitor_facings.
Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "competitor_brands",
        sa.Column("competitor_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("brand_name", sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint("competitor_id"),
        sa.UniqueConstraint("brand_name"),
    )

    op.create_table(
        "competitor_products",
        sa.Column("competitor_product_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("competitor_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("weight", sa.String(50), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["competitor_id"], ["competitor_brands.competitor_id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.user_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("competitor_product_id"),
    )
    op.create_index("ix_competitor_products_competitor_id", "competitor_products", ["competitor_id"])

    op.create_table(
        "competitor_facings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("competitor_id", sa.Integer(), nullable=False),
        # NULL for brand-level counts
        sa.Column("competitor_product_id", sa.Integer(), nullable=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("facings_count", sa.Integer(), nullable=False),
        sa.Column("batch_id", sa.String(36), nullable=True),
        sa.Column(
            "report_date",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.CheckConstraint("facings_count >= 0", name="ck_competitor_facings_count_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["store_id"], ["stores.store_id"]),
        sa.ForeignKeyConstraint(["competitor_id"], ["competitor_brands.competitor_id"]),
        sa.ForeignKeyConstraint(
            ["competitor_product_id"], ["competitor_products.competitor_product_id"]
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_competitor_facings_batch_id", "competitor_facings", ["batch_id"])
    op.create_index(
        "idx_competitor_facings_user_report_date",
        "competitor_facings",
        ["user_id", "report_date"],
    )


def downgrade() -> None:
    op.drop_index("idx_competitor_facings_user_report_date", table_name="competitor_facings")
    op.drop_index("idx_competitor_facings_batch_id", table_name="competitor_facings")
    op.drop_table("competitor_facings")
    op.drop_index("ix_competitor_products_competitor_id", table_name="competitor_products")
    op.drop_table("competitor_products")
    op.drop_table("competitor_brands")
