from uuid import uuid4

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from catalog.db.base import Base


class Product(Base):
    __tablename__ = "product"
    product_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: uuid4().hex)
    product_name: Mapped[str] = mapped_column(String(200), nullable=False)
    image: Mapped[str | None] = mapped_column(String(500))
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    category_id: Mapped[str] = mapped_column(ForeignKey("category.category_id"), index=True)
