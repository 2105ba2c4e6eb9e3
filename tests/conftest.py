from typing import Generator, List, Optional
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog.api.v1.dependencies import get_category_service
from catalog.api.v1.exception_handlers import register_exception_handlers
from catalog.api.v1.routers.category_router import CategoryRouter
from catalog.db.session import DBSessionManager
from catalog.schemas.category_schema import CategorySchema
from catalog.services.category_service import CategoryService
from catalog.services.category_store import CategoryStore
from catalog.services.local_persistence_service import LocalPersistenceService


def make_category(
    category_id: str,
    parent_id: Optional[str] = None,
    name: Optional[str] = None,
    active: bool = True,
) -> CategorySchema.Out:
    return CategorySchema.Out(
        id=category_id,
        name=name or f"Category {category_id}",
        parent_id=parent_id,
        active=active,
    )


@pytest.fixture
def chain_categories() -> List[CategorySchema.Out]:
    """A -> B -> C: 1 is the root, 2 its child, 3 the grandchild."""
    return [
        make_category("1", None, "A"),
        make_category("2", "1", "B"),
        make_category("3", "2", "C"),
    ]


@pytest.fixture
def store(chain_categories) -> CategoryStore:
    return CategoryStore(chain_categories)


@pytest.fixture
def persistence(store) -> AsyncMock:
    """Persistence mock that echoes accepted updates back as stored records."""
    mock = AsyncMock()

    def _update(category_id, payload):
        return store.get(category_id).model_copy(update=payload.changes())

    mock.update_category.side_effect = _update
    return mock


@pytest.fixture
def product_index() -> AsyncMock:
    mock = AsyncMock()
    mock.list_products_by_category.return_value = []
    mock.reassign_products.return_value = 0
    return mock


@pytest.fixture
def db_manager() -> Generator[DBSessionManager, None, None]:
    """Fresh in-memory SQLite database for each test."""
    manager = DBSessionManager("sqlite://")
    manager.create_all()
    yield manager
    manager.engine.dispose()


@pytest.fixture
def local_backend(db_manager) -> LocalPersistenceService:
    return LocalPersistenceService(db_manager.get_session)


@pytest.fixture
def category_service(local_backend) -> CategoryService:
    return CategoryService(local_backend, local_backend)


@pytest.fixture
def api_app(category_service) -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(CategoryRouter().router, prefix="/api/v1")
    app.dependency_overrides[get_category_service] = lambda: category_service
    return app


@pytest.fixture
def client(api_app) -> Generator[TestClient, None, None]:
    with TestClient(api_app) as test_client:
        yield test_client
