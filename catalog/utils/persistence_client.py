from typing import Any, List, Optional

import httpx

from catalog.domain.exceptions import ConflictError, NotFoundError, ValidationError
from catalog.domain.interfaces.infrastructure_interfaces import (
    IPersistenceAPI,
    IProductIndex,
)
from catalog.schemas.category_schema import CategorySchema
from catalog.schemas.product_schema import ProductSchema
from catalog.utils.logger import get_logger


logger = get_logger("persistence_client")


class PersistenceAPIClient(IPersistenceAPI, IProductIndex):
    """
    Async HTTP client for the remote catalog API.

    Serves both as the persistence API and the product index since the
    remote side exposes both under ``/categories``. Requests are never
    retried; callers re-validate against fresh state instead.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # ---------------- persistence API ---------------------------------
    async def fetch_all_categories(self) -> List[CategorySchema.Out]:
        data = await self._request("GET", "/categories")
        return [CategorySchema.Out.model_validate(item) for item in data or []]

    async def create_category(
        self, payload: CategorySchema.Create
    ) -> CategorySchema.Out:
        data = await self._request(
            "POST", "/categories", json=payload.model_dump(by_alias=True)
        )
        return CategorySchema.Out.model_validate(data)

    async def update_category(
        self, category_id: str, payload: CategorySchema.Update
    ) -> CategorySchema.Out:
        data = await self._request(
            "PATCH",
            f"/categories/{category_id}",
            category_id=category_id,
            json=payload.wire_payload(),
        )
        return CategorySchema.Out.model_validate(data)

    async def delete_category(self, category_id: str) -> None:
        await self._request(
            "DELETE", f"/categories/{category_id}", category_id=category_id
        )

    # ---------------- product index -----------------------------------
    async def list_products_by_category(
        self, category_id: str
    ) -> List[ProductSchema.Ref]:
        data = await self._request(
            "GET", f"/categories/{category_id}/products", category_id=category_id
        )
        return [ProductSchema.Ref.model_validate(item) for item in data or []]

    async def reassign_products(self, from_id: str, to_id: str) -> int:
        data = await self._request(
            "POST",
            f"/categories/{from_id}/reassign",
            category_id=from_id,
            json={"newCategoryId": to_id},
        )
        return ProductSchema.ReassignResult.model_validate(data or {}).count

    # ------------------------------------------------------------------
    async def _request(
        self,
        method: str,
        url: str,
        category_id: Optional[str] = None,
        **kwargs,
    ) -> Any:
        response = await self._client.request(method, url, **kwargs)
        logger.debug(f"{method} {url} -> {response.status_code}")

        if response.status_code == 404:
            raise NotFoundError(category_id or url)
        if response.status_code == 409:
            raise ConflictError(category_id, _error_message(response))
        if response.status_code in (400, 422):
            raise ValidationError(_error_message(response))
        response.raise_for_status()

        if response.status_code == 204 or not response.content:
            return None
        return response.json()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or body)
    return str(body)
