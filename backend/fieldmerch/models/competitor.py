"""
FieldMerch Backend: Competitor SQLAlchemy Models
==================================================

What:  Competitor brands, their products, and the facings counted for them.
Who:   Brands and products are read by the directory service during batch
       validation; facings are written by BatchService and read by the
       combined own-plus-competitor listing.

Table Design:
    - competitor_facings mirrors podravka_facings (same batch_id and
      report_date semantics) but is keyed to a competitor brand, with an
      optional competitor product for brand-level counts.
    - A competitor batch lives entirely in competitor_facings; batch ids
      are never shared across the two tables.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from fieldmerch.database import Base


class CompetitorBrand(Base):
    """A competing brand stocked in the same categories."""

    __tablename__ = "competitor_brands"

    competitor_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    brand_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<CompetitorBrand(competitor_id={self.competitor_id}, brand_name='{self.brand_name}')>"


class CompetitorProduct(Base):
    """A product of a competitor brand."""

    __tablename__ = "competitor_products"

    competitor_product_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    competitor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("competitor_brands.competitor_id"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    weight: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<CompetitorProduct(competitor_product_id={self.competitor_product_id}, name='{self.name}')>"


class CompetitorFacing(Base):
    """One facing count for a competitor brand (or one of its products) in a store."""

    __tablename__ = "competitor_facings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.user_id"), nullable=False)
    store_id: Mapped[int] = mapped_column(Integer, ForeignKey("stores.store_id"), nullable=False)
    competitor_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("competitor_brands.competitor_id"),
        nullable=False,
    )
    # NULL when the count covers the whole brand
    competitor_product_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("competitor_products.competitor_product_id"),
        nullable=True,
    )

    category: Mapped[str] = mapped_column(String(50), nullable=False)
    facings_count: Mapped[int] = mapped_column(Integer, nullable=False)
    batch_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    report_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("facings_count >= 0", name="ck_competitor_facings_count_non_negative"),
        Index("idx_competitor_facings_batch_id", "batch_id"),
        Index("idx_competitor_facings_user_report_date", "user_id", "report_date"),
    )
