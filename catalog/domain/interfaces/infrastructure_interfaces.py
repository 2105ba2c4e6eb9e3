"""Interfaces of the external collaborators the category subsystem talks to."""

from abc import ABC, abstractmethod
from typing import List

from catalog.schemas.category_schema import CategorySchema
from catalog.schemas.product_schema import ProductSchema


class IPersistenceAPI(ABC):
    """Remote source of truth for category records."""

    @abstractmethod
    async def fetch_all_categories(self) -> List[CategorySchema.Out]:
        """Return every category record."""

    @abstractmethod
    async def create_category(
        self, payload: CategorySchema.Create
    ) -> CategorySchema.Out:
        """Create a category; the returned record carries the assigned id."""

    @abstractmethod
    async def update_category(
        self, category_id: str, payload: CategorySchema.Update
    ) -> CategorySchema.Out:
        """Apply the fields set on ``payload`` and return the stored record."""

    @abstractmethod
    async def delete_category(self, category_id: str) -> None:
        """Delete a category record."""


class IProductIndex(ABC):
    """Knows which products reference which category."""

    @abstractmethod
    async def list_products_by_category(
        self, category_id: str
    ) -> List[ProductSchema.Ref]:
        """Products currently referencing ``category_id``."""

    @abstractmethod
    async def reassign_products(self, from_id: str, to_id: str) -> int:
        """Move every product of ``from_id`` to ``to_id``; return how many moved."""
