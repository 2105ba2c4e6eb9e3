from typing import List

from fastapi import APIRouter, Depends, Query, Response, status

from catalog.api.v1.dependencies import get_category_service
from catalog.schemas.category_schema import CategorySchema
from catalog.schemas.deletion_schema import DeletionOutcome, DeletionStatus
from catalog.schemas.product_schema import ProductSchema
from catalog.schemas.tree_schema import Forest, VisibleNode
from catalog.services.category_service import CategoryService
from catalog.services.tree_builder import forest_to_json
from catalog.utils.logger import get_logger

logger = get_logger("category_router")


class CategoryRouter:
    def __init__(self):
        self.router = APIRouter(prefix="/categories", tags=["Categories"])
        self._register()

    def _register(self):
        self.router.get("/tree", response_model=Forest)(self._get_forest)
        self.router.get("/tree/visible", response_model=List[VisibleNode])(self._visible_rows)
        self.router.post("/refresh")(self._refresh)
        self.router.get("/deletions", response_model=List[DeletionStatus])(self._pending_deletions)
        self.router.get("/", response_model=List[CategorySchema.Out])(self._list_all)
        self.router.post("/", response_model=CategorySchema.Out, status_code=201)(self._create_category)
        self.router.get("/{category_id}", response_model=CategorySchema.Out)(self._get_category)
        self.router.patch("/{category_id}", response_model=CategorySchema.Out)(self._update_category)
        self.router.post("/{category_id}/rename", response_model=CategorySchema.Out)(self._rename_category)
        self.router.post("/{category_id}/move", response_model=CategorySchema.Out)(self._move_category)
        self.router.get("/{category_id}/breadcrumb", response_model=List[CategorySchema.Out])(self._breadcrumb)
        self.router.get("/{category_id}/products", response_model=List[ProductSchema.Ref])(self._list_products)
        self.router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)(self._delete_category)
        self.router.post(
            "/{category_id}/reassign-and-delete", response_model=DeletionOutcome
        )(self._reassign_and_delete)

    async def _get_forest(self, service: CategoryService = Depends(get_category_service)):
        logger.info("Building category forest")
        forest = await service.get_forest()
        # deep chains overflow the stock JSON encoders
        return Response(content=forest_to_json(forest), media_type="application/json")

    async def _visible_rows(
        self,
        expanded: List[str] = Query(default=[]),
        service: CategoryService = Depends(get_category_service),
    ):
        return await service.get_visible_rows(expanded)

    async def _refresh(self, service: CategoryService = Depends(get_category_service)):
        logger.info("Refreshing category store")
        return {"count": await service.refresh()}

    async def _pending_deletions(self, service: CategoryService = Depends(get_category_service)):
        return await service.pending_deletions()

    async def _list_all(self, service: CategoryService = Depends(get_category_service)):
        return await service.list_categories()

    async def _create_category(
        self,
        payload: CategorySchema.Create,
        service: CategoryService = Depends(get_category_service),
    ):
        logger.info("Creating category")
        return await service.create_category(
            payload.name, payload.description, payload.parent_id
        )

    async def _get_category(
        self, category_id: str, service: CategoryService = Depends(get_category_service)
    ):
        return await service.get_category(category_id)

    async def _update_category(
        self,
        category_id: str,
        payload: CategorySchema.Update,
        service: CategoryService = Depends(get_category_service),
    ):
        logger.info(f"Updating category {category_id}")
        return await service.update_category(category_id, payload)

    async def _rename_category(
        self,
        category_id: str,
        payload: CategorySchema.Rename,
        service: CategoryService = Depends(get_category_service),
    ):
        logger.info(f"Renaming category {category_id}")
        return await service.rename_category(category_id, payload.name)

    async def _move_category(
        self,
        category_id: str,
        payload: CategorySchema.Move,
        service: CategoryService = Depends(get_category_service),
    ):
        logger.info(f"Moving category {category_id} under {payload.parent_id or 'root'}")
        return await service.move_category(category_id, payload.parent_id)

    async def _breadcrumb(
        self, category_id: str, service: CategoryService = Depends(get_category_service)
    ):
        return await service.breadcrumb(category_id)

    async def _list_products(
        self, category_id: str, service: CategoryService = Depends(get_category_service)
    ):
        return await service.list_products(category_id)

    async def _delete_category(
        self, category_id: str, service: CategoryService = Depends(get_category_service)
    ):
        logger.info(f"Deleting category {category_id}")
        await service.delete_category(category_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def _reassign_and_delete(
        self,
        category_id: str,
        payload: CategorySchema.Reassign,
        service: CategoryService = Depends(get_category_service),
    ):
        logger.info(
            f"Reassigning products of {category_id} to {payload.target_category_id} and deleting"
        )
        return await service.reassign_and_delete(category_id, payload.target_category_id)


category_router = CategoryRouter().router
