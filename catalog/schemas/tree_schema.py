from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from catalog.core.constants import DiagnosticKind
from catalog.schemas.category_schema import CategorySchema


class TreeNode(BaseModel):
    category: CategorySchema.Out
    children: List["TreeNode"] = Field(default_factory=list)
    orphan: bool = False
    cycle_detected: bool = Field(False, alias="cycleDetected")
    depth: int = 0

    model_config = ConfigDict(populate_by_name=True)

    @property
    def id(self) -> str:
        return self.category.id


class TreeDiagnostic(BaseModel):
    kind: DiagnosticKind
    category_id: str = Field(alias="categoryId")
    parent_id: Optional[str] = Field(None, alias="parentId")
    message: str

    model_config = ConfigDict(populate_by_name=True)


class Forest(BaseModel):
    roots: List[TreeNode] = Field(default_factory=list)
    diagnostics: List[TreeDiagnostic] = Field(default_factory=list)


class VisibleNode(BaseModel):
    """One row of the tree as currently expanded by the caller."""

    id: str
    name: str
    parent_id: Optional[str] = Field(None, alias="parentId")
    depth: int
    active: bool
    has_children: bool = Field(alias="hasChildren")
    expanded: bool
    orphan: bool = False
    cycle_detected: bool = Field(False, alias="cycleDetected")

    model_config = ConfigDict(populate_by_name=True)


TreeNode.model_rebuild()
