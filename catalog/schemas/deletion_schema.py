from pydantic import BaseModel, ConfigDict, Field

from catalog.core.constants import DeletionState


class DeletionOutcome(BaseModel):
    category_id: str = Field(alias="categoryId")
    state: DeletionState
    reassigned_products: int = Field(0, alias="reassignedProducts")
    target_category_id: str | None = Field(None, alias="targetCategoryId")

    model_config = ConfigDict(populate_by_name=True)


class DeletionStatus(BaseModel):
    """Where a category currently sits in the delete protocol."""

    category_id: str = Field(alias="categoryId")
    state: DeletionState
    product_count: int = Field(0, alias="productCount")

    model_config = ConfigDict(populate_by_name=True)
