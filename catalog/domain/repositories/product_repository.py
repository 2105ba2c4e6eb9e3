from typing import Sequence

from sqlalchemy import update
from sqlalchemy.orm import Session

from catalog.domain.repositories.base_sqlalchemy import SQLAlchemyRepository
from catalog.models.product_model import Product


class ProductRepository(SQLAlchemyRepository[Product, str]):
    order_by = (Product.product_name,)

    def __init__(self, db: Session):
        super().__init__(Product, db)

    def by_category(self, category_id: str) -> Sequence[Product]:
        return self.filter_by(Product.category_id == category_id)

    def count_by_category(self, category_id: str) -> int:
        return self.count(Product.category_id == category_id)

    def reassign(self, from_id: str, to_id: str) -> int:
        """Bulk-move every product of ``from_id``; returns how many moved."""
        result = self.db.execute(
            update(Product)
            .where(Product.category_id == from_id)
            .values(category_id=to_id)
        )
        return result.rowcount
