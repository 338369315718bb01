"""
Pydantic schemas for the products resource.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from app.schemas.categories import CamelModel, CategoryRef


class VariantAttribute(CamelModel):
    """
    Free-form name/value pair.
    """

    name: str = Field(..., description="Attribute name")
    value: str = Field(..., description="Attribute value")


class VariantWrite(CamelModel):
    """
    Variant as submitted with a product.

    Required fields are checked by the service so every variant problem is
    reported with the same message.
    """

    size: Optional[str] = Field(None, description="Variant size")
    color: Optional[str] = Field(None, description="Variant color")
    sku: Optional[str] = Field(None, description="Stock keeping unit")
    quantity: int = Field(0, description="Units in stock")
    price: Optional[float] = Field(None, description="Unit price")
    discount_price: Optional[float] = Field(None, description="Discounted unit price")
    attributes: List[VariantAttribute] = Field(default_factory=list, description="Variant attributes")
    images: List[str] = Field(default_factory=list, description="Image URLs, the first one becomes main")


class ProductWrite(CamelModel):
    """
    Body of product create and update requests.
    """

    name: Optional[str] = Field(None, max_length=255, description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    category_id: Optional[str] = Field(None, description="Category ID")
    is_active: bool = Field(True, description="Whether the product is listed")
    variants: List[VariantWrite] = Field(default_factory=list, description="Product variants")


class VariantResponse(CamelModel):
    """
    Variant as returned by the product detail endpoint.
    """

    id: str
    size: str
    color: str
    sku: str = ""
    quantity: int
    price: float
    discount_price: Optional[float] = None
    attributes: List[VariantAttribute] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list, description="Image URLs, main image first")


class ProductDetailResponse(CamelModel):
    """
    Full product with its variants.
    """

    id: str
    name: str
    description: str
    category_id: str
    category: Optional[CategoryRef] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    variants: List[VariantResponse] = Field(default_factory=list)


class ProductListItem(CamelModel):
    """
    Product row of the admin list with values derived from its variants.
    """

    id: str
    name: str
    description: str
    category_id: str
    category: Optional[CategoryRef] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    variants_count: int = Field(0, description="Number of variants")
    total_quantity: int = Field(0, description="Sum of variant quantities")
    min_price: float = Field(0.0, description="Lowest variant price, 0 without variants")
    max_price: float = Field(0.0, description="Highest variant price, 0 without variants")
    images_count: int = Field(0, description="Number of images across variants")
    main_image: Optional[str] = Field(None, description="URL of the image shown in lists")
