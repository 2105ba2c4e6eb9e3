"""Domain exceptions that represent category hierarchy rule violations."""

from typing import Any, Dict, Optional, Sequence


class DomainException(Exception):
    """Base exception for all domain-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(message)


class CategoryException(DomainException):
    """Base exception for category-related errors."""


class ValidationError(CategoryException):
    """Malformed input: empty name, unknown parent, bad reassignment target."""

    def __init__(self, reason: str, field: Optional[str] = None):
        self.reason = reason
        self.field = field
        super().__init__(
            f"Invalid category data: {reason}",
            "INVALID_CATEGORY_DATA",
            {"field": field} if field else None,
        )


class CycleError(CategoryException):
    """A proposed reparent would make a category its own ancestor."""

    def __init__(self, category_id: str, parent_id: str):
        self.category_id = category_id
        self.parent_id = parent_id
        if category_id == parent_id:
            message = f"Category {category_id} cannot be its own parent"
        else:
            message = (
                f"Cannot move category {category_id} under {parent_id}: "
                f"{parent_id} is one of its descendants"
            )
        super().__init__(
            message,
            "CATEGORY_CYCLE",
            {"category_id": category_id, "parent_id": parent_id},
        )


class NotFoundError(CategoryException):
    """Category not found in the store."""

    def __init__(self, category_id: str):
        self.category_id = category_id
        super().__init__(
            f"Category not found: {category_id}",
            "CATEGORY_NOT_FOUND",
            {"category_id": category_id},
        )


class DependencyError(CategoryException):
    """
    Deletion blocked by child categories or referencing products.

    Expected outcome of a delete attempt, carrying what the caller needs to
    drive a reassignment: the blocking child ids and product references.
    """

    def __init__(
        self,
        category_id: str,
        reason: str,
        child_ids: Sequence[str] = (),
        products: Sequence[Any] = (),
    ):
        self.category_id = category_id
        self.reason = reason
        self.child_ids = list(child_ids)
        self.products = list(products)
        super().__init__(
            f"Category {category_id} {reason}",
            "CATEGORY_HAS_DEPENDENCIES",
            {
                "category_id": category_id,
                "child_ids": self.child_ids,
                "products": [_dump(p) for p in self.products],
                "product_count": self.product_count,
            },
        )

    @property
    def product_count(self) -> int:
        return len(self.products)


class ConflictError(CategoryException):
    """Persistence rejected the operation because server state diverged."""

    def __init__(self, category_id: Optional[str], reason: str):
        self.category_id = category_id
        self.reason = reason
        super().__init__(
            f"Category conflict: {reason}",
            "CATEGORY_CONFLICT",
            {"category_id": category_id} if category_id else None,
        )


def _dump(product: Any) -> Any:
    if hasattr(product, "model_dump"):
        return product.model_dump(by_alias=True)
    return product
