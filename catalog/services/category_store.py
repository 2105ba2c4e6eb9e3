from typing import Dict, Iterable, List

from catalog.domain.exceptions import NotFoundError
from catalog.schemas.category_schema import CategorySchema


class CategoryStore:
    """
    Client-side materialized view of all categories, keyed by id.

    Holds whatever the persistence layer last returned. No validation happens
    here; callers decide what is allowed before writing to it.
    """

    def __init__(self, categories: Iterable[CategorySchema.Out] = ()):
        self._items: Dict[str, CategorySchema.Out] = {}
        self.hydrated = False
        if categories:
            self.hydrate(categories)

    def hydrate(self, categories: Iterable[CategorySchema.Out]) -> None:
        """Replace the whole mapping with a fresh fetch."""
        self._items = {category.id: category for category in categories}
        self.hydrated = True

    def get(self, category_id: str) -> CategorySchema.Out:
        category = self._items.get(category_id)
        if category is None:
            raise NotFoundError(category_id)
        return category

    def upsert(self, category: CategorySchema.Out) -> None:
        self._items[category.id] = category

    def remove(self, category_id: str) -> None:
        self._items.pop(category_id, None)

    def list(self) -> List[CategorySchema.Out]:
        return list(self._items.values())

    def children_of(self, category_id: str) -> List[CategorySchema.Out]:
        return [c for c in self._items.values() if c.parent_id == category_id]

    def as_mapping(self) -> Dict[str, CategorySchema.Out]:
        return dict(self._items)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._items

    def __len__(self) -> int:
        return len(self._items)
