from typing import Optional

from catalog.domain.exceptions import CycleError, ValidationError
from catalog.domain.interfaces.infrastructure_interfaces import IPersistenceAPI
from catalog.schemas.category_schema import CategorySchema
from catalog.services.category_store import CategoryStore
from catalog.services.tree_builder import ancestor_ids, depth_of, subtree_height
from catalog.utils.logger import get_logger


logger = get_logger("mutation_service")


class MutationService:
    """
    Validates create/update requests against the store, forwards accepted
    ones to persistence and applies the confirmed record to the store.

    Nothing is written to the store before persistence answers; ids are
    only ever the ones persistence assigned.
    """

    def __init__(
        self,
        store: CategoryStore,
        persistence: IPersistenceAPI,
        max_depth: int = 16,
        max_categories: int = 5000,
    ):
        self.store = store
        self.persistence = persistence
        self.max_depth = max_depth
        self.max_categories = max_categories

    # ---------------- create -----------------------------------------
    async def create(
        self,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[str] = None,
    ) -> CategorySchema.Out:
        clean_name = self._require_name(name)
        if len(self.store) >= self.max_categories:
            raise ValidationError(
                f"category limit of {self.max_categories} reached"
            )
        if parent_id is not None:
            self._check_parent_depth(parent_id, subtree=0)

        payload = CategorySchema.Create(
            name=clean_name, description=description, parent_id=parent_id
        )
        created = await self.persistence.create_category(payload)
        self.store.upsert(created)
        logger.info(
            f"Created category {created.id} ({created.name!r}) under {parent_id or 'root'}"
        )
        return created

    # ---------------- update -----------------------------------------
    async def update(
        self, category_id: str, fields: CategorySchema.Update
    ) -> CategorySchema.Out:
        current = self.store.get(category_id)
        changes = fields.changes()

        if "name" in changes:
            changes["name"] = self._require_name(changes["name"])
        if "active" in changes and changes["active"] is None:
            raise ValidationError("active flag must be true or false", "active")
        if "parent_id" in changes and changes["parent_id"] != current.parent_id:
            self._check_reparent(category_id, changes["parent_id"])

        updated = await self.persistence.update_category(
            category_id, CategorySchema.Update(**changes)
        )
        self.store.upsert(updated)
        logger.info(f"Updated category {category_id}: {sorted(changes)}")
        return updated

    # ---------------- guards -----------------------------------------
    def _require_name(self, name: Optional[str]) -> str:
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("name must not be empty", "name")
        return clean

    def _check_reparent(self, category_id: str, new_parent_id: Optional[str]) -> None:
        """Reject moves that would create a cycle; runs before any write."""
        if new_parent_id is None:
            return
        if new_parent_id == category_id:
            raise CycleError(category_id, new_parent_id)
        categories = self.store.as_mapping()
        if new_parent_id not in categories:
            raise ValidationError("parent not found", "parent_id")
        try:
            chain = ancestor_ids(categories, new_parent_id)
        except CycleError:
            # the proposed parent already sits on a broken chain
            raise CycleError(category_id, new_parent_id)
        if category_id in chain:
            raise CycleError(category_id, new_parent_id)
        self._check_depth(len(chain) + 1 + subtree_height(categories, category_id))

    def _check_parent_depth(self, parent_id: str, subtree: int) -> None:
        categories = self.store.as_mapping()
        if parent_id not in categories:
            raise ValidationError("parent not found", "parent_id")
        try:
            parent_depth = depth_of(categories, parent_id)
        except CycleError:
            raise ValidationError(
                f"parent {parent_id} is part of a category cycle", "parent_id"
            )
        self._check_depth(parent_depth + 1 + subtree)

    def _check_depth(self, depth: int) -> None:
        if depth > self.max_depth:
            raise ValidationError(
                f"maximum category depth of {self.max_depth} exceeded", "parent_id"
            )
