"""Create directory and podravka facings tables

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates users, stores, podravka_products and podravka_facings.
How:   Generic SQLAlchemy types only, so the same migration runs on
       PostgreSQL in production and SQLite in local tooling.

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'employee'")),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "stores",
        sa.Column("store_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("store_name", sa.String(255), nullable=False),
        # Owning salesperson; NULL until an admin assigns one
        sa.Column("user_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.user_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("store_id"),
    )
    op.create_index("ix_stores_user_id", "stores", ["user_id"])

    op.create_table(
        "podravka_products",
        sa.Column("product_id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("podravka_code", sa.String(50), nullable=False),
        sa.Column("elkos_code", sa.String(50), nullable=True),
        sa.Column("product_category", sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint("product_id"),
    )
    op.create_index("ix_podravka_products_category", "podravka_products", ["category"])

    op.create_table(
        "podravka_facings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("store_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        # Zero is valid: product not found on shelf
        sa.Column("facings_count", sa.Integer(), nullable=False),
        # UUID4 shared by one submission; NULL for rows recorded before batching
        sa.Column("batch_id", sa.String(36), nullable=True),
        sa.Column(
            "report_date",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.CheckConstraint("facings_count >= 0", name="ck_podravka_facings_count_non_negative"),
        sa.ForeignKeyConstraint(["user_id"], ["users.user_id"]),
        sa.ForeignKeyConstraint(["store_id"], ["stores.store_id"]),
        sa.ForeignKeyConstraint(["product_id"], ["podravka_products.product_id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_podravka_facings_batch_id", "podravka_facings", ["batch_id"])
    op.create_index(
        "idx_podravka_facings_user_report_date",
        "podravka_facings",
        ["user_id", "report_date"],
    )


def downgrade() -> None:
    op.drop_index("idx_podravka_facings_user_report_date", table_name="podravka_facings")
    op.drop_index("idx_podravka_facings_batch_id", table_name="podravka_facings")
    op.drop_table("podravka_facings")
    op.drop_index("ix_podravka_products_category", table_name="podravka_products")
    op.drop_table("podravka_products")
    op.drop_index("ix_stores_user_id", table_name="stores")
    op.drop_table("stores")
    op.drop_table("users")
