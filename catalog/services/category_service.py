import asyncio
from contextlib import asynccontextmanager
from typing import Collection, Dict, List, Optional, Tuple

from catalog.domain.interfaces.infrastructure_interfaces import (
    IPersistenceAPI,
    IProductIndex,
)
from catalog.schemas.category_schema import CategorySchema
from catalog.schemas.deletion_schema import DeletionOutcome, DeletionStatus
from catalog.schemas.product_schema import ProductSchema
from catalog.schemas.tree_schema import Forest, VisibleNode
from catalog.services.category_store import CategoryStore
from catalog.services.deletion_guard import DeletionGuard
from catalog.services.mutation_service import MutationService
from catalog.services.tree_builder import TreeBuilder, ancestor_ids, visible_nodes
from catalog.utils.logger import get_logger


logger = get_logger("category_service")


class CategoryService:
    """Category hierarchy operations exposed to the admin UI."""

    def __init__(
        self,
        persistence: IPersistenceAPI,
        product_index: IProductIndex,
        store: Optional[CategoryStore] = None,
        max_depth: int = 16,
        max_categories: int = 5000,
    ):
        self.persistence = persistence
        self.product_index = product_index
        self.store = store or CategoryStore()
        self.builder = TreeBuilder()
        self.mutations = MutationService(
            self.store, persistence, max_depth=max_depth, max_categories=max_categories
        )
        self.deletions = DeletionGuard(self.store, persistence, product_index)
        # id -> (lock, number of callers holding or waiting on it)
        self._locks: Dict[str, Tuple[asyncio.Lock, int]] = {}

    # ---------------- hydration --------------------------------------
    async def refresh(self) -> int:
        """Re-fetch every category and replace the store contents."""
        categories = await self.persistence.fetch_all_categories()
        self.store.hydrate(categories)
        self.deletions.forget_missing()
        logger.info(f"Hydrated category store with {len(categories)} categories")
        return len(categories)

    async def _ensure_hydrated(self) -> None:
        if not self.store.hydrated:
            await self.refresh()

    @asynccontextmanager
    async def _serialized(self, category_id: str):
        """One structural request per category id at a time."""
        lock, users = self._locks.get(category_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[category_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[category_id]
            if users == 1:
                del self._locks[category_id]
            else:
                self._locks[category_id] = (lock, users - 1)

    # ---------------- reads ------------------------------------------
    async def get_forest(self) -> Forest:
        await self._ensure_hydrated()
        forest = self.builder.build(self.store.list())
        for diagnostic in forest.diagnostics:
            logger.warning(f"Category tree: {diagnostic.message}")
        return forest

    async def get_visible_rows(self, expanded: Collection[str] = ()) -> List[VisibleNode]:
        return visible_nodes(await self.get_forest(), set(expanded))

    async def list_categories(self) -> List[CategorySchema.Out]:
        await self._ensure_hydrated()
        return self.store.list()

    async def get_category(self, category_id: str) -> CategorySchema.Out:
        await self._ensure_hydrated()
        return self.store.get(category_id)

    async def breadcrumb(self, category_id: str) -> List[CategorySchema.Out]:
        """Path from the root down to ``category_id``, inclusive."""
        await self._ensure_hydrated()
        categories = self.store.as_mapping()
        chain = ancestor_ids(categories, category_id)
        path = [categories[i] for i in reversed(chain)]
        path.append(categories[category_id])
        return path

    async def list_products(self, category_id: str) -> List[ProductSchema.Ref]:
        await self._ensure_hydrated()
        self.store.get(category_id)
        return await self.product_index.list_products_by_category(category_id)

    # ---------------- mutations --------------------------------------
    async def create_category(
        self,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> CategorySchema.Out:
        await self._ensure_hydrated()
        return await self.mutations.create(name, description, parent_id)

    async def update_category(
        self, category_id: str, fields: CategorySchema.Update
    ) -> CategorySchema.Out:
        await self._ensure_hydrated()
        async with self._serialized(category_id):
            return await self.mutations.update(category_id, fields)

    async def rename_category(self, category_id: str, name: str) -> CategorySchema.Out:
        return await self.update_category(category_id, CategorySchema.Update(name=name))

    async def move_category(
        self, category_id: str, new_parent_id: Optional[str]
    ) -> CategorySchema.Out:
        return await self.update_category(
            category_id, CategorySchema.Update(parent_id=new_parent_id)
        )

    async def set_active(self, category_id: str, active: bool) -> CategorySchema.Out:
        return await self.update_category(
            category_id, CategorySchema.Update(active=active)
        )

    async def delete_category(self, category_id: str) -> DeletionOutcome:
        await self._ensure_hydrated()
        async with self._serialized(category_id):
            return await self.deletions.delete(category_id)

    async def reassign_and_delete(
        self, category_id: str, target_category_id: str
    ) -> DeletionOutcome:
        await self._ensure_hydrated()
        async with self._serialized(category_id):
            return await self.deletions.reassign_and_delete(
                category_id, target_category_id
            )

    async def pending_deletions(self) -> List[DeletionStatus]:
        return self.deletions.pending()
