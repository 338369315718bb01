"""
Pydantic schemas for the categories resource.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base schema serialized with camelCase keys, accepting either spelling on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CategoryRef(CamelModel):
    """
    Minimal reference to a category (parent or child link).
    """

    id: str = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")


class CategoryWrite(CamelModel):
    """
    Body of create and update requests.

    The name is trimmed and checked by the service so that a missing, empty or
    whitespace-only name produces the same error.
    """

    name: Optional[str] = Field(None, max_length=255, description="Category name")
    parent_id: Optional[str] = Field(None, description="Parent category ID, omitted or null for a root category")

    @field_validator("parent_id")
    @classmethod
    def blank_parent_is_root(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty parent id as no parent."""
        if v is not None and not v.strip():
            return None
        return v


class CategoryResponse(CamelModel):
    """
    Category with its direct parent and direct counts.
    """

    id: str = Field(..., description="Category ID")
    name: str = Field(..., description="Category name")
    parent_id: Optional[str] = Field(None, description="Parent category ID")
    parent: Optional[CategoryRef] = Field(None, description="Direct parent")
    products_count: int = Field(0, ge=0, description="Number of directly associated products")
    children_count: int = Field(0, ge=0, description="Number of direct child categories")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class CategoryDetailResponse(CategoryResponse):
    """
    Category with child references and associated product IDs.
    """

    children: List[CategoryRef] = Field(default_factory=list, description="Direct child categories")
    product_ids: List[str] = Field(default_factory=list, description="IDs of directly associated products")


class CategoryTreeNode(CategoryResponse):
    """
    Category node of a tree built from a flat list.
    """

    children: List["CategoryTreeNode"] = Field(default_factory=list, description="Child nodes in source order")


class DeleteResponse(BaseModel):
    """
    Result of a successful delete.
    """

    success: bool = True


CategoryTreeNode.model_rebuild()
