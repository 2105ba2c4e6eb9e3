from typing import Callable, Iterable, List

from sqlalchemy.orm import Session

from catalog.domain.exceptions import ConflictError, NotFoundError, ValidationError
from catalog.domain.interfaces.infrastructure_interfaces import (
    IPersistenceAPI,
    IProductIndex,
)
from catalog.domain.unit_of_work import UnitOfWork
from catalog.models.category_model import Category
from catalog.models.product_model import Product
from catalog.schemas.category_schema import CategorySchema
from catalog.schemas.product_schema import ProductSchema
from catalog.utils.logger import get_logger


logger = get_logger("local_persistence")

# schema field -> ORM column
_UPDATABLE = {
    "name": "category_name",
    "description": "description",
    "parent_id": "parent_category_id",
    "active": "is_active",
}


def to_category_out(category: Category) -> CategorySchema.Out:
    return CategorySchema.Out(
        id=category.category_id,
        name=category.category_name,
        description=category.description,
        parent_id=category.parent_category_id,
        active=category.is_active,
    )


def to_product_ref(product: Product) -> ProductSchema.Ref:
    return ProductSchema.Ref(
        id=product.product_id,
        name=product.product_name,
        image=product.image,
        stock=product.stock,
        category=product.category_id,
    )


class LocalPersistenceService(IPersistenceAPI, IProductIndex):
    """
    SQLAlchemy-backed stand-in for the remote catalog API.

    Used for local development and tests. Applies the same server-side rules
    the remote API does: unknown parents are rejected and a category with
    children or products cannot be deleted.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def _uow(self) -> UnitOfWork:
        return UnitOfWork(self.session_factory())

    # ---------------- persistence API ---------------------------------
    async def fetch_all_categories(self) -> List[CategorySchema.Out]:
        with self._uow() as uow:
            return [to_category_out(c) for c in uow.categories.get_all()]

    async def create_category(
        self, payload: CategorySchema.Create
    ) -> CategorySchema.Out:
        with self._uow() as uow:
            if payload.parent_id and not uow.categories.exists(payload.parent_id):
                raise ValidationError("parent not found", "parent_id")
            category = Category(
                category_name=payload.name,
                description=payload.description,
                parent_category_id=payload.parent_id,
                position=uow.categories.next_position(),
                is_active=True,
            )
            uow.categories.add(category)
            uow.categories.flush()
            return to_category_out(category)

    async def update_category(
        self, category_id: str, payload: CategorySchema.Update
    ) -> CategorySchema.Out:
        with self._uow() as uow:
            category = uow.categories.get(category_id)
            if category is None:
                raise NotFoundError(category_id)
            changes = payload.changes()
            parent_id = changes.get("parent_id")
            if parent_id is not None and not uow.categories.exists(parent_id):
                raise ValidationError("parent not found", "parent_id")
            for field, value in changes.items():
                setattr(category, _UPDATABLE[field], value)
            uow.categories.flush()
            return to_category_out(category)

    async def delete_category(self, category_id: str) -> None:
        with self._uow() as uow:
            category = uow.categories.get(category_id)
            if category is None:
                raise NotFoundError(category_id)
            if uow.categories.count_children(category_id):
                raise ConflictError(category_id, "category has subcategories")
            if uow.products.count_by_category(category_id):
                raise ConflictError(category_id, "category is still referenced by products")
            uow.categories.delete(category)

    # ---------------- product index -----------------------------------
    async def list_products_by_category(
        self, category_id: str
    ) -> List[ProductSchema.Ref]:
        with self._uow() as uow:
            return [to_product_ref(p) for p in uow.products.by_category(category_id)]

    async def reassign_products(self, from_id: str, to_id: str) -> int:
        with self._uow() as uow:
            if not uow.categories.exists(from_id):
                raise NotFoundError(from_id)
            if not uow.categories.exists(to_id):
                raise ValidationError("reassignment target not found", "target_category_id")
            moved = uow.products.reassign(from_id, to_id)
        logger.info(f"Moved {moved} product(s) from {from_id} to {to_id}")
        return moved

    # ---------------- seeding -----------------------------------------
    async def add_product(self, payload: ProductSchema.Create) -> ProductSchema.Ref:
        with self._uow() as uow:
            if not uow.categories.exists(payload.category):
                raise ValidationError("category not found", "category")
            product = Product(
                product_name=payload.name,
                image=payload.image,
                stock=payload.stock,
                category_id=payload.category,
            )
            uow.products.add(product)
            uow.products.flush()
            return to_product_ref(product)

    def seed_categories(self, records: Iterable[CategorySchema.Out]) -> int:
        """Insert records as given, ids and parent links included, unchecked."""
        count = 0
        with self._uow() as uow:
            position = uow.categories.next_position()
            for record in records:
                uow.categories.add(
                    Category(
                        category_id=record.id,
                        category_name=record.name,
                        description=record.description,
                        parent_category_id=record.parent_id,
                        position=position + count,
                        is_active=record.active,
                    )
                )
                count += 1
        return count
