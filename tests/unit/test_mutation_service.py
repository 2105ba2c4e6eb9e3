"""Unit tests for MutationService - validation runs before any write."""

import pytest

from catalog.domain.exceptions import (
    ConflictError,
    CycleError,
    NotFoundError,
    ValidationError,
)
from catalog.schemas.category_schema import CategorySchema
from catalog.services.mutation_service import MutationService
from catalog.services.tree_builder import build_forest, flatten_forest
from tests.conftest import make_category


class TestMutationService:
    @pytest.fixture
    def service(self, store, persistence):
        return MutationService(store, persistence, max_depth=4, max_categories=10)

    # ---------------- create -----------------------------------------
    @pytest.mark.asyncio
    async def test_create_root(self, service, store, persistence):
        persistence.create_category.return_value = make_category("42", None, "Shoes")

        created = await service.create("  Shoes ", "Footwear")

        payload = persistence.create_category.await_args.args[0]
        assert payload.name == "Shoes"
        assert payload.description == "Footwear"
        assert payload.parent_id is None
        assert created.id == "42"
        assert store.get("42") == created

    @pytest.mark.asyncio
    async def test_create_child(self, service, store, persistence):
        persistence.create_category.return_value = make_category("42", "3", "D")

        await service.create("D", parent_id="3")

        assert persistence.create_category.await_args.args[0].parent_id == "3"
        assert [c.id for c in store.children_of("3")] == ["42"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None])
    async def test_create_rejects_empty_name(self, service, persistence, name):
        with pytest.raises(ValidationError):
            await service.create(name)
        persistence.create_category.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_rejects_unknown_parent(self, service, persistence):
        with pytest.raises(ValidationError) as exc_info:
            await service.create("Orphan", parent_id="nope")

        assert exc_info.value.reason == "parent not found"
        persistence.create_category.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_untouched_until_persistence_answers(self, service, store, persistence):
        persistence.create_category.side_effect = ConflictError(None, "server said no")

        with pytest.raises(ConflictError):
            await service.create("New")

        assert len(store) == 3

    @pytest.mark.asyncio
    async def test_create_respects_max_depth(self, store, persistence):
        service = MutationService(store, persistence, max_depth=2)

        with pytest.raises(ValidationError):
            await service.create("Too deep", parent_id="3")
        persistence.create_category.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_respects_category_cap(self, store, persistence):
        service = MutationService(store, persistence, max_categories=3)

        with pytest.raises(ValidationError):
            await service.create("One too many")

    # ---------------- update -----------------------------------------
    @pytest.mark.asyncio
    async def test_update_unknown_id(self, service, persistence):
        with pytest.raises(NotFoundError):
            await service.update("nope", CategorySchema.Update(name="x"))
        persistence.update_category.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rename(self, service, store, persistence):
        updated = await service.update("2", CategorySchema.Update(name=" Bags "))

        assert updated.name == "Bags"
        assert store.get("2").name == "Bags"
        payload = persistence.update_category.await_args.args[1]
        assert payload.changes() == {"name": "Bags"}

    @pytest.mark.asyncio
    async def test_rename_to_empty_is_rejected(self, service, persistence):
        with pytest.raises(ValidationError):
            await service.update("2", CategorySchema.Update(name="  "))
        persistence.update_category.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_self_parent_is_a_cycle(self, service, store, persistence):
        with pytest.raises(CycleError):
            await service.update("2", CategorySchema.Update(parent_id="2"))

        persistence.update_category.assert_not_awaited()
        assert store.get("2").parent_id == "1"

    @pytest.mark.asyncio
    async def test_move_under_descendant_is_a_cycle(self, service, store, persistence):
        before = store.as_mapping()

        with pytest.raises(CycleError):
            await service.update("1", CategorySchema.Update(parent_id="3"))
        with pytest.raises(CycleError):
            await service.update("2", CategorySchema.Update(parent_id="3"))

        persistence.update_category.assert_not_awaited()
        assert store.as_mapping() == before

    @pytest.mark.asyncio
    async def test_move_to_unknown_parent(self, service, persistence):
        with pytest.raises(ValidationError):
            await service.update("3", CategorySchema.Update(parent_id="ghost"))
        persistence.update_category.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_valid_move_reshapes_forest(self, service, store):
        await service.update("3", CategorySchema.Update(parent_id="1"))

        edges = set(flatten_forest(build_forest(store.list())))
        assert ("3", "1") in edges
        assert ("3", "2") not in edges

    @pytest.mark.asyncio
    async def test_move_to_root(self, service, store, persistence):
        await service.update("2", CategorySchema.Update(parent_id=None))

        assert store.get("2").parent_id is None
        payload = persistence.update_category.await_args.args[1]
        assert payload.wire_payload() == {"parentCategory": None}

    @pytest.mark.asyncio
    async def test_move_respects_max_depth_of_subtree(self, store, persistence):
        store.upsert(make_category("x"))
        service = MutationService(store, persistence, max_depth=2)

        # 1 has a subtree of height 2, so it cannot go below anything
        with pytest.raises(ValidationError):
            await service.update("1", CategorySchema.Update(parent_id="x"))

    @pytest.mark.asyncio
    async def test_move_under_cyclic_chain_is_rejected(self, store, persistence):
        store.upsert(make_category("a", "b"))
        store.upsert(make_category("b", "a"))
        service = MutationService(store, persistence)

        with pytest.raises(CycleError):
            await service.update("3", CategorySchema.Update(parent_id="a"))

    @pytest.mark.asyncio
    async def test_unchanged_parent_skips_cycle_check(self, service, persistence):
        await service.update("3", CategorySchema.Update(parent_id="2", description="same place"))

        persistence.update_category.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_deactivate(self, service, store):
        await service.update("3", CategorySchema.Update(active=False))

        assert store.get("3").active is False
