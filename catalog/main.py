from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.middleware.cors import CORSMiddleware

from catalog.api.v1 import api_router
from catalog.api.v1.dependencies import get_category_service, shutdown_category_service
from catalog.api.v1.exception_handlers import register_exception_handlers
from catalog.core.config import settings
from catalog.middlewares.logging_middleware import LoggingMiddleware
from catalog.utils.logger import configure_logging, get_logger


configure_logging(settings.debug)
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await get_category_service().refresh()
    except Exception as e:
        # reads hydrate lazily, so a failed warm-up is not fatal
        logger.error(f"Initial category fetch failed: {e}")
    yield
    await shutdown_category_service()


app = FastAPI(title="Storefront Catalog Administration", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_hosts_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

register_exception_handlers(app)

# Prometheus instrumentation
Instrumentator().instrument(app).expose(app)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "healthy", "message": "Catalog service is running"}


@app.get("/")
async def root():
    return {"message": "Storefront Catalog Administration"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
