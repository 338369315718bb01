"""
Product management endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, Path

from app.api.dependencies import get_product_service
from app.api.responses import (
    Tags,
    item_error_responses,
    read_error_responses,
    write_error_responses,
)
from app.schemas.categories import DeleteResponse
from app.schemas.products import ProductDetailResponse, ProductListItem, ProductWrite
from app.services.products import ProductService

router = APIRouter()


@router.get(
    "",
    response_model=List[ProductListItem],
    summary="List products",
    description="Products newest first with variant count, stock, price range and main image.",
    responses=read_error_responses,
    tags=[Tags.PRODUCTS],
)
async def list_products(service: ProductService = Depends(get_product_service)) -> List[ProductListItem]:
    return await service.list_products()


@router.get(
    "/{product_id}",
    response_model=ProductDetailResponse,
    summary="Get a product",
    responses=item_error_responses,
    tags=[Tags.PRODUCTS],
)
async def get_product(
    product_id: str = Path(..., description="Product ID"),
    service: ProductService = Depends(get_product_service),
) -> ProductDetailResponse:
    return await service.get_product(product_id)


@router.post(
    "",
    response_model=ProductDetailResponse,
    summary="Create a product",
    description="Creates a product with its variants, attributes and images in one transaction.",
    responses=write_error_responses,
    tags=[Tags.PRODUCTS],
)
async def create_product(
    data: ProductWrite,
    service: ProductService = Depends(get_product_service),
) -> ProductDetailResponse:
    return await service.create_product(data)


@router.put(
    "/{product_id}",
    response_model=ProductDetailResponse,
    summary="Update a product",
    description="Updates product fields and replaces all variants; rejected while variants are on orders.",
    responses=write_error_responses,
    tags=[Tags.PRODUCTS],
)
async def update_product(
    data: ProductWrite,
    product_id: str = Path(..., description="Product ID"),
    service: ProductService = Depends(get_product_service),
) -> ProductDetailResponse:
    return await service.update_product(product_id, data)


@router.delete(
    "/{product_id}",
    response_model=DeleteResponse,
    summary="Delete a product",
    description="Deletes a product with its variants unless a variant is referenced by an order.",
    responses=write_error_responses,
    tags=[Tags.PRODUCTS],
)
async def delete_product(
    product_id: str = Path(..., description="Product ID"),
    service: ProductService = Depends(get_product_service),
) -> DeleteResponse:
    await service.delete_product(product_id)
    return DeleteResponse()
