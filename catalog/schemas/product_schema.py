from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductSchema:
    class Ref(BaseModel):
        """Product reference as reported by the product index."""

        id: str = Field(alias="_id")
        name: str
        image: Optional[str] = None
        stock: int = 0
        category: Optional[str] = None

        model_config = ConfigDict(populate_by_name=True, from_attributes=True)

        @field_validator("id", "category", mode="before")
        @classmethod
        def stringify(cls, v):
            return None if v is None else str(v)

    class Create(BaseModel):
        name: str
        image: Optional[str] = None
        stock: int = Field(0, ge=0)
        category: str

    class ReassignResult(BaseModel):
        count: int = 0
