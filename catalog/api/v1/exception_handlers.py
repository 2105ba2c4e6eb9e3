"""Exception handlers to translate domain exceptions to HTTP responses."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from catalog.domain.exceptions import (
    CategoryException,
    ConflictError,
    CycleError,
    DependencyError,
    DomainException,
    NotFoundError,
    ValidationError,
)
from catalog.utils.logger import get_logger


logger = get_logger("exception_handlers")


class DomainExceptionHandler:
    """Centralized handler for domain exceptions."""

    # Mapping of domain exceptions to HTTP status codes
    EXCEPTION_STATUS_MAP = {
        ValidationError: status.HTTP_400_BAD_REQUEST,
        CycleError: status.HTTP_400_BAD_REQUEST,
        NotFoundError: status.HTTP_404_NOT_FOUND,
        DependencyError: status.HTTP_409_CONFLICT,
        ConflictError: status.HTTP_409_CONFLICT,
    }

    # Base exception type status codes
    BASE_EXCEPTION_STATUS_MAP = {
        CategoryException: status.HTTP_400_BAD_REQUEST,
    }

    @classmethod
    def status_for(cls, exc: DomainException) -> int:
        status_code = cls.EXCEPTION_STATUS_MAP.get(type(exc))
        if status_code is None:
            for base_type, base_status in cls.BASE_EXCEPTION_STATUS_MAP.items():
                if isinstance(exc, base_type):
                    return base_status
            return status.HTTP_500_INTERNAL_SERVER_ERROR
        return status_code

    @classmethod
    def response_body(cls, exc: DomainException) -> dict:
        return {
            "detail": exc.message,
            "error_code": exc.error_code,
            "type": exc.__class__.__name__,
            "details": exc.details,
        }


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = DomainExceptionHandler.status_for(exc)
    if status_code >= 500:
        logger.error(f"Unhandled domain error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content=DomainExceptionHandler.response_body(exc),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
