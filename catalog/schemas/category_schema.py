from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _coerce_id(v: Any) -> Optional[str]:
    """Normalize wire ids: ints become strings, embedded records become their id."""
    if v is None:
        return None
    if isinstance(v, dict):
        v = v.get("_id", v.get("id"))
        if v is None:
            return None
    v = str(v).strip()
    return v or None


class CategorySchema:
    class Out(BaseModel):
        id: str = Field(alias="_id")
        name: str
        description: Optional[str] = None
        parent_id: Optional[str] = Field(None, alias="parentCategory")
        active: bool = Field(True, alias="isActive")

        model_config = ConfigDict(populate_by_name=True, from_attributes=True)

        @field_validator("id", mode="before")
        @classmethod
        def validate_id(cls, v):
            coerced = _coerce_id(v)
            if coerced is None:
                raise ValueError("category id is required")
            return coerced

        @field_validator("parent_id", mode="before")
        @classmethod
        def validate_parent_id(cls, v):
            return _coerce_id(v)

    class Create(BaseModel):
        name: str
        description: Optional[str] = None
        parent_id: Optional[str] = Field(None, alias="parentCategory")

        model_config = ConfigDict(populate_by_name=True)

        @field_validator("parent_id", mode="before")
        @classmethod
        def validate_parent_id(cls, v):
            return _coerce_id(v)

    class Update(BaseModel):
        """Partial update; only fields explicitly set are sent on."""

        name: Optional[str] = None
        description: Optional[str] = None
        parent_id: Optional[str] = Field(None, alias="parentCategory")
        active: Optional[bool] = Field(None, alias="isActive")

        model_config = ConfigDict(populate_by_name=True)

        @field_validator("parent_id", mode="before")
        @classmethod
        def validate_parent_id(cls, v):
            return _coerce_id(v)

        def changes(self) -> dict:
            return self.model_dump(exclude_unset=True)

        def wire_payload(self) -> dict:
            return self.model_dump(by_alias=True, exclude_unset=True)

    class Rename(BaseModel):
        name: str

    class Move(BaseModel):
        parent_id: Optional[str] = Field(None, alias="parentCategory")

        model_config = ConfigDict(populate_by_name=True)

        @field_validator("parent_id", mode="before")
        @classmethod
        def validate_parent_id(cls, v):
            return _coerce_id(v)

    class Reassign(BaseModel):
        target_category_id: str = Field(alias="newCategoryId")

        model_config = ConfigDict(populate_by_name=True)

        @field_validator("target_category_id", mode="before")
        @classmethod
        def validate_target(cls, v):
            coerced = _coerce_id(v)
            if coerced is None:
                raise ValueError("target category id is required")
            return coerced
