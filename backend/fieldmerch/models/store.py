"""
FieldMerch Backend: Store SQLAlchemy Model
============================================

What:  ORM model for the `stores` table (retail locations visited by merchandisers).
Who:   Looked up by the directory service while validating facing batches;
       joined by the batch summary and detail queries for `store_name`.

Ownership:
    `user_id` is the salesperson who owns the store. Only that user (or an
    admin) may submit facings for it. NULL means no owner has been assigned
    yet, in which case only admins can submit.
"""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fieldmerch.database import Base


class Store(Base):
    """A retail store, owned by at most one salesperson."""

    __tablename__ = "stores"

    store_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    store_name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("users.user_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Store(store_id={self.store_id}, store_name='{self.store_name}', user_id={self.user_id})>"
