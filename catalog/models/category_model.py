from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.db.base import Base


def _new_id() -> str:
    return uuid4().hex


class Category(Base):
    __tablename__ = "category"
    category_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)
    category_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    # no ON DELETE cascade: dependents must be resolved before a delete
    parent_category_id: Mapped[str | None] = mapped_column(
        ForeignKey("category.category_id"), index=True
    )
    # insertion order, so flat listings come back in creation order
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
