from typing import Optional

from catalog.core.config import AppSettings, settings
from catalog.core.constants import PersistenceMode
from catalog.db.session import DBSessionManager
from catalog.services.category_service import CategoryService
from catalog.services.local_persistence_service import LocalPersistenceService
from catalog.utils.logger import get_logger
from catalog.utils.persistence_client import PersistenceAPIClient


__all__ = ["build_category_service", "get_category_service", "shutdown_category_service"]

logger = get_logger("dependencies")

_service: Optional[CategoryService] = None


def build_category_service(app_settings: AppSettings = settings) -> CategoryService:
    """Wire the category service to the configured persistence backend."""
    if app_settings.persistence.mode == PersistenceMode.REMOTE.value:
        client = PersistenceAPIClient(
            app_settings.persistence.base_url,
            api_token=app_settings.persistence.api_token,
            timeout=app_settings.persistence.timeout_seconds,
        )
        persistence = product_index = client
        logger.info(f"Using remote catalog API at {app_settings.persistence.base_url}")
    else:
        db = DBSessionManager(
            app_settings.database.database_url, echo=app_settings.database.echo
        )
        db.create_all()
        persistence = product_index = LocalPersistenceService(db.get_session)
        logger.info("Using local SQLAlchemy catalog backend")

    return CategoryService(
        persistence,
        product_index,
        max_depth=app_settings.tree.max_depth,
        max_categories=app_settings.tree.max_categories,
    )


def get_category_service() -> CategoryService:
    """Process-wide category service; the store lives as long as the app."""
    global _service
    if _service is None:
        _service = build_category_service()
    return _service


async def shutdown_category_service() -> None:
    global _service
    if _service is not None and isinstance(_service.persistence, PersistenceAPIClient):
        await _service.persistence.aclose()
    _service = None
