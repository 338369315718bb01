"""
Category management endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from app.api.dependencies import get_category_service
from app.api.responses import (
    Tags,
    item_error_responses,
    read_error_responses,
    write_error_responses,
)
from app.schemas.categories import (
    CategoryDetailResponse,
    CategoryResponse,
    CategoryTreeNode,
    CategoryWrite,
    DeleteResponse,
)
from app.services.categories import CategoryService

router = APIRouter()


@router.get(
    "",
    response_model=List[CategoryResponse],
    summary="List categories",
    description="All categories, newest first, with their parent and direct product and subcategory counts.",
    responses=read_error_responses,
    tags=[Tags.CATEGORIES],
)
async def list_categories(service: CategoryService = Depends(get_category_service)) -> List[CategoryResponse]:
    return await service.list_categories()


@router.get(
    "/tree",
    response_model=List[CategoryTreeNode],
    summary="Category tree",
    description="Categories arranged as a forest; categories whose parent is filtered out become roots.",
    responses=read_error_responses,
    tags=[Tags.CATEGORIES],
)
async def get_category_tree(
    search: Optional[str] = Query(None, description="Case-insensitive substring of the category name"),
    only_roots: bool = Query(False, alias="onlyRoots", description="Keep only categories without a parent"),
    service: CategoryService = Depends(get_category_service),
) -> List[CategoryTreeNode]:
    """
    Build the category tree.

    Args:
        search: Optional name filter applied before the tree is built
        only_roots: Keep only top-level categories

    Returns:
        Root nodes with nested children
    """
    return await service.get_tree(search=search, only_roots=only_roots)


@router.get(
    "/{category_id}",
    response_model=CategoryDetailResponse,
    summary="Get a category",
    responses=item_error_responses,
    tags=[Tags.CATEGORIES],
)
async def get_category(
    category_id: str = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> CategoryDetailResponse:
    return await service.get_category(category_id)


@router.post(
    "",
    response_model=CategoryDetailResponse,
    summary="Create a category",
    description="Creates a root category, or a subcategory when an existing parent ID is given.",
    responses=write_error_responses,
    tags=[Tags.CATEGORIES],
)
async def create_category(
    data: CategoryWrite,
    service: CategoryService = Depends(get_category_service),
) -> CategoryDetailResponse:
    return await service.create_category(data)


@router.put(
    "/{category_id}",
    response_model=CategoryDetailResponse,
    summary="Update a category",
    description="Renames and/or moves a category. Moving a category under itself or its descendants is rejected.",
    responses=write_error_responses,
    tags=[Tags.CATEGORIES],
)
async def update_category(
    data: CategoryWrite,
    category_id: str = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> CategoryDetailResponse:
    return await service.update_category(category_id, data)


@router.delete(
    "/{category_id}",
    response_model=DeleteResponse,
    summary="Delete a category",
    description="Deletes a category that has no products and no subcategories.",
    responses=write_error_responses,
    tags=[Tags.CATEGORIES],
)
async def delete_category(
    category_id: str = Path(..., description="Category ID"),
    service: CategoryService = Depends(get_category_service),
) -> DeleteResponse:
    await service.delete_category(category_id)
    return DeleteResponse()
