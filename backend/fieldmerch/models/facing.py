"""
FieldMerch Backend: Facing SQLAlchemy Model
=============================================

What:  ORM model representing the `podravka_facings` table.
Why:   Each row is one shelf count: how many facings of a product a
       merchandiser saw in a store on a given date.
Who:   Written by BatchService; read by BatchQueryService and Alembic.

Table Design:
    - batch_id groups rows submitted together. Rows written before batching
      existed carry NULL and are excluded from batch summaries.
    - facings_count of zero is meaningful ("not found on shelf").
    - report_date is set once per batch so a batch groups cleanly by date.

Lifecycle:
    1. Created only by a batch create (all rows share one batch_id)
    2. Only facings_count is ever updated, via batch update
    3. Deleted only as a whole batch, via batch delete
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from fieldmerch.database import Base


class PodravkaFacing(Base):
    """
    One recorded facing count for an own-brand product in a store.

    Query Patterns:
        - Batch detail: WHERE batch_id = :id → idx_podravka_facings_batch_id
        - User batches: WHERE user_id = :uid AND batch_id IS NOT NULL
          ORDER BY report_date DESC → idx_podravka_facings_user_report_date
        - Batch update/delete: WHERE batch_id = :id AND user_id = :uid
    """

    __tablename__ = "podravka_facings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.user_id"),
        nullable=False,
    )
    store_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("stores.store_id"),
        nullable=False,
    )
    product_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("podravka_products.product_id"),
        nullable=False,
    )

    category: Mapped[str] = mapped_column(String(50), nullable=False)

    facings_count: Mapped[int] = mapped_column(Integer, nullable=False)

    # UUID4 string shared by every row of one submission
    batch_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)

    report_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint("facings_count >= 0", name="ck_podravka_facings_count_non_negative"),
        Index("idx_podravka_facings_batch_id", "batch_id"),
        Index("idx_podravka_facings_user_report_date", "user_id", "report_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<PodravkaFacing(id={self.id}, batch_id='{self.batch_id}', "
            f"product_id={self.product_id}, facings_count={self.facings_count})>"
        )
