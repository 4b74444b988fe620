"""
FieldMerch Backend: Own Product SQLAlchemy Model
==================================================

What:  ORM model for the `podravka_products` table (the company's own catalogue).
Who:   Referenced by every facing row; joined by the batch detail query
       to resolve the product name.
"""

from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fieldmerch.database import Base


class PodravkaProduct(Base):
    """A product from the company's own range."""

    __tablename__ = "podravka_products"

    product_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Shelf category the product is counted under (e.g. 'fridge', 'shelf')
    category: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    podravka_code: Mapped[str] = mapped_column(String(50), nullable=False)
    elkos_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    product_category: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<PodravkaProduct(product_id={self.product_id}, name='{self.name}')>"
