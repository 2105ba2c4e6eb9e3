"""Tests for the SQLAlchemy-backed catalog backend on in-memory SQLite."""

import pytest

from catalog.domain.exceptions import ConflictError, NotFoundError, ValidationError
from catalog.schemas.category_schema import CategorySchema
from catalog.schemas.product_schema import ProductSchema
from tests.conftest import make_category


class TestLocalPersistenceService:
    @pytest.mark.asyncio
    async def test_create_assigns_ids_and_keeps_order(self, local_backend):
        a = await local_backend.create_category(CategorySchema.Create(name="A"))
        b = await local_backend.create_category(CategorySchema.Create(name="B", parent_id=a.id))
        c = await local_backend.create_category(CategorySchema.Create(name="C"))

        fetched = await local_backend.fetch_all_categories()

        assert a.id and b.id and a.id != b.id
        assert [x.id for x in fetched] == [a.id, b.id, c.id]
        assert fetched[1].parent_id == a.id
        assert all(x.active for x in fetched)

    @pytest.mark.asyncio
    async def test_create_with_unknown_parent(self, local_backend):
        with pytest.raises(ValidationError):
            await local_backend.create_category(CategorySchema.Create(name="B", parent_id="ghost"))

    @pytest.mark.asyncio
    async def test_update_partial_fields(self, local_backend):
        a = await local_backend.create_category(CategorySchema.Create(name="A", description="first"))
        b = await local_backend.create_category(CategorySchema.Create(name="B", parent_id=a.id))

        moved = await local_backend.update_category(b.id, CategorySchema.Update(parent_id=None))
        renamed = await local_backend.update_category(a.id, CategorySchema.Update(name="A2"))

        assert moved.parent_id is None
        assert moved.name == "B"
        assert renamed.name == "A2"
        assert renamed.description == "first"

    @pytest.mark.asyncio
    async def test_update_unknown(self, local_backend):
        with pytest.raises(NotFoundError):
            await local_backend.update_category("ghost", CategorySchema.Update(name="x"))

    @pytest.mark.asyncio
    async def test_delete_refuses_dependents(self, local_backend):
        a = await local_backend.create_category(CategorySchema.Create(name="A"))
        b = await local_backend.create_category(CategorySchema.Create(name="B", parent_id=a.id))
        await local_backend.add_product(ProductSchema.Create(name="Tote", category=b.id))

        with pytest.raises(ConflictError):
            await local_backend.delete_category(a.id)
        with pytest.raises(ConflictError):
            await local_backend.delete_category(b.id)

        assert len(await local_backend.fetch_all_categories()) == 2

    @pytest.mark.asyncio
    async def test_delete(self, local_backend):
        a = await local_backend.create_category(CategorySchema.Create(name="A"))

        await local_backend.delete_category(a.id)

        assert await local_backend.fetch_all_categories() == []
        with pytest.raises(NotFoundError):
            await local_backend.delete_category(a.id)

    @pytest.mark.asyncio
    async def test_reassign_products(self, local_backend):
        x = await local_backend.create_category(CategorySchema.Create(name="X"))
        y = await local_backend.create_category(CategorySchema.Create(name="Y"))
        for i in range(3):
            await local_backend.add_product(ProductSchema.Create(name=f"P{i}", category=x.id))
        await local_backend.add_product(ProductSchema.Create(name="Q", category=y.id))

        moved = await local_backend.reassign_products(x.id, y.id)

        assert moved == 3
        assert await local_backend.list_products_by_category(x.id) == []
        assert len(await local_backend.list_products_by_category(y.id)) == 4

    @pytest.mark.asyncio
    async def test_reassign_to_unknown_target(self, local_backend):
        x = await local_backend.create_category(CategorySchema.Create(name="X"))

        with pytest.raises(ValidationError):
            await local_backend.reassign_products(x.id, "ghost")

    @pytest.mark.asyncio
    async def test_seeded_broken_data_is_returned_as_is(self, local_backend):
        local_backend.seed_categories(
            [make_category("1"), make_category("2", "ghost"), make_category("3", "3")]
        )

        fetched = await local_backend.fetch_all_categories()

        assert [(c.id, c.parent_id) for c in fetched] == [
            ("1", None),
            ("2", "ghost"),
            ("3", "3"),
        ]
