from sqlalchemy import func, select
from sqlalchemy.orm import Session

from catalog.domain.repositories.base_sqlalchemy import SQLAlchemyRepository
from catalog.models.category_model import Category


class CategoryRepository(SQLAlchemyRepository[Category, str]):
    order_by = (Category.position, Category.created_at)

    def __init__(self, db: Session):
        super().__init__(Category, db)

    def next_position(self) -> int:
        return (self.db.scalar(select(func.max(Category.position))) or 0) + 1

    def count_children(self, parent_id: str) -> int:
        return self.count(Category.parent_category_id == parent_id)
