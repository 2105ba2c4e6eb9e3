from contextlib import contextmanager
from typing import Dict, List, Optional

from catalog.core.constants import DeletionState
from catalog.domain.exceptions import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)
from catalog.domain.interfaces.infrastructure_interfaces import (
    IPersistenceAPI,
    IProductIndex,
)
from catalog.schemas.deletion_schema import DeletionOutcome, DeletionStatus
from catalog.schemas.product_schema import ProductSchema
from catalog.services.category_store import CategoryStore
from catalog.utils.logger import get_logger


logger = get_logger("deletion_guard")


class DeletionGuard:
    """
    Two-phase delete: check dependencies, optionally reassign products,
    then delete.

    Checking -> (children) DependencyError, nothing done
             -> (products) AwaitingReassignment, DependencyError with the products
             -> (neither) Deleting
    AwaitingReassignment -> reassign_and_delete -> Deleting
    Deleting -> persistence delete, then store removal; a rejection surfaces
    as ConflictError and the category stays in the store.

    A failed phase puts the category back in the state it had before the
    attempt. Deleted categories are forgotten.
    """

    def __init__(
        self,
        store: CategoryStore,
        persistence: IPersistenceAPI,
        product_index: IProductIndex,
    ):
        self.store = store
        self.persistence = persistence
        self.product_index = product_index
        self._states: Dict[str, DeletionState] = {}
        self._awaiting: Dict[str, List[ProductSchema.Ref]] = {}

    async def delete(self, category_id: str) -> DeletionOutcome:
        self.store.get(category_id)
        with self._phase(category_id, DeletionState.CHECKING):
            self._ensure_no_children(category_id)
            products = await self.product_index.list_products_by_category(category_id)

        if products:
            self._states[category_id] = DeletionState.AWAITING_REASSIGNMENT
            self._awaiting[category_id] = products
            logger.warning(
                f"Delete of {category_id} awaiting reassignment of {len(products)} product(s)"
            )
            raise DependencyError(
                category_id,
                f"is referenced by {len(products)} product(s)",
                products=products,
            )
        return await self._delete_now(category_id)

    async def reassign_and_delete(
        self, category_id: str, target_category_id: str
    ) -> DeletionOutcome:
        self.store.get(category_id)
        if target_category_id == category_id:
            raise ValidationError(
                "reassignment target must differ from the deleted category",
                "target_category_id",
            )
        if target_category_id not in self.store:
            raise ValidationError(
                "reassignment target not found", "target_category_id"
            )
        self._ensure_no_children(category_id)

        moved = await self.product_index.reassign_products(
            category_id, target_category_id
        )
        # nothing references the category any more
        self._forget(category_id)
        logger.info(
            f"Reassigned {moved} product(s) from {category_id} to {target_category_id}"
        )
        outcome = await self._delete_now(category_id)
        outcome.reassigned_products = moved
        outcome.target_category_id = target_category_id
        return outcome

    def state_of(self, category_id: str) -> Optional[DeletionState]:
        return self._states.get(category_id)

    def awaiting_reassignment(self) -> Dict[str, int]:
        """Category ids blocked on products, with the product count seen."""
        return {cid: len(products) for cid, products in self._awaiting.items()}

    def pending(self) -> List[DeletionStatus]:
        """Every category with a delete in progress or awaiting reassignment."""
        counts = self.awaiting_reassignment()
        return [
            DeletionStatus(
                category_id=category_id,
                state=self.state_of(category_id),
                product_count=counts.get(category_id, 0),
            )
            for category_id in self._states
        ]

    def forget_missing(self) -> None:
        """Drop tracking for categories no longer in the store."""
        for category_id in [cid for cid in self._states if cid not in self.store]:
            self._forget(category_id)

    # ---------------- phases -----------------------------------------
    @contextmanager
    def _phase(self, category_id: str, state: DeletionState):
        previous = self._states.get(category_id)
        self._states[category_id] = state
        try:
            yield
        except BaseException:
            if previous is None:
                self._states.pop(category_id, None)
            else:
                self._states[category_id] = previous
            raise

    def _ensure_no_children(self, category_id: str) -> None:
        children = self.store.children_of(category_id)
        if children:
            logger.warning(
                f"Delete of {category_id} blocked by {len(children)} subcategories"
            )
            raise DependencyError(
                category_id,
                "has subcategories",
                child_ids=[child.id for child in children],
            )

    async def _delete_now(self, category_id: str) -> DeletionOutcome:
        with self._phase(category_id, DeletionState.DELETING):
            try:
                await self.persistence.delete_category(category_id)
            except NotFoundError:
                raise ConflictError(
                    category_id, f"category {category_id} no longer exists on the server"
                )
        self.store.remove(category_id)
        self._forget(category_id)
        logger.info(f"Deleted category {category_id}")
        return DeletionOutcome(category_id=category_id, state=DeletionState.DELETED)

    def _forget(self, category_id: str) -> None:
        self._states.pop(category_id, None)
        self._awaiting.pop(category_id, None)
