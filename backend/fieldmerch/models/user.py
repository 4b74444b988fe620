"""
FieldMerch Backend: User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table (submitters of facings).
Who:   Read by the batch detail query to resolve the submitter's name.

Users are issued and managed by the authentication service; this backend
only reads them.
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from fieldmerch.database import Base


class User(Base):
    """A field employee or administrator who records facings."""

    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Display name; exposed as `user` in batch detail rows
    username: Mapped[str] = mapped_column(String(100), nullable=False)

    # 'admin' or 'employee'
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="employee")

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, username='{self.username}', role='{self.role}')>"
