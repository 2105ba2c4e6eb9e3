import pytest

from catalog.core.constants import DeletionState
from catalog.domain.exceptions import CycleError, DependencyError
from catalog.schemas.product_schema import ProductSchema


class TestCategoryWorkflows:
    @pytest.mark.asyncio
    async def test_hierarchy_lifecycle(self, category_service, local_backend):
        """
        A -> B -> C, then:
        - moving B under C is refused
        - deleting A is refused while it has B
        - once B is a root, deleting A is refused because of product P
        - reassigning P to B deletes A
        """
        a = await category_service.create_category("A")
        b = await category_service.create_category("B", parent_id=a.id)
        c = await category_service.create_category("C", parent_id=b.id)

        with pytest.raises(CycleError):
            await category_service.move_category(b.id, c.id)
        assert (await category_service.get_category(b.id)).parent_id == a.id

        with pytest.raises(DependencyError) as exc_info:
            await category_service.delete_category(a.id)
        assert exc_info.value.child_ids == [b.id]

        await category_service.move_category(b.id, None)
        product = await local_backend.add_product(ProductSchema.Create(name="P", category=a.id))

        with pytest.raises(DependencyError) as exc_info:
            await category_service.delete_category(a.id)
        assert [p.id for p in exc_info.value.products] == [product.id]

        outcome = await category_service.reassign_and_delete(a.id, b.id)

        assert outcome.state == DeletionState.DELETED
        assert outcome.reassigned_products == 1
        remaining = await local_backend.fetch_all_categories()
        assert a.id not in [x.id for x in remaining]
        assert [p.id for p in await local_backend.list_products_by_category(b.id)] == [product.id]

        forest = await category_service.get_forest()
        assert [root.category.name for root in forest.roots] == ["B"]
        assert [child.category.name for child in forest.roots[0].children] == ["C"]

    @pytest.mark.asyncio
    async def test_reassign_moves_every_product(self, category_service, local_backend):
        x = await category_service.create_category("X")
        y = await category_service.create_category("Y")
        for name in ("P1", "P2", "P3"):
            await local_backend.add_product(ProductSchema.Create(name=name, category=x.id))
        await local_backend.add_product(ProductSchema.Create(name="Q", category=y.id))

        outcome = await category_service.reassign_and_delete(x.id, y.id)

        assert outcome.reassigned_products == 3
        assert len(await local_backend.list_products_by_category(y.id)) == 4
        assert await local_backend.list_products_by_category(x.id) == []
        assert [c.name for c in await category_service.list_categories()] == ["Y"]

    @pytest.mark.asyncio
    async def test_store_matches_backend_after_refresh(self, category_service, local_backend):
        a = await category_service.create_category("  Bags  ")
        await category_service.create_category("Totes", parent_id=a.id)
        await category_service.set_active(a.id, False)

        cached = [c.model_dump() for c in await category_service.list_categories()]
        await category_service.refresh()
        fetched = [c.model_dump() for c in await category_service.list_categories()]

        assert cached == fetched
        assert fetched[0]["name"] == "Bags"
        assert fetched[0]["active"] is False
