"""Business logic for products and their variants."""

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ProductInUseError, ProductNotFoundError, ProductValidationError
from app.core.metrics import record_business_event, time_db_query
from app.core.tracing import create_span
from app.db.models.base import utcnow
from app.db.models.category import Category
from app.db.models.order import OrderItem
from app.db.models.product import Product, ProductAttribute, ProductImage, ProductVariant
from app.schemas.categories import CategoryRef
from app.schemas.products import (
    ProductDetailResponse,
    ProductListItem,
    ProductWrite,
    VariantAttribute,
    VariantResponse,
    VariantWrite,
)

CENT = Decimal("0.01")
# NUMERIC(10, 2) and INTEGER column limits
MAX_PRICE = Decimal(10) ** 8
MAX_QUANTITY = 2**31 - 1


def _money(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _category_ref(product: Product) -> Optional[CategoryRef]:
    category = product.category
    return CategoryRef(id=category.id, name=category.name) if category is not None else None


def pick_main_image(variants: List[ProductVariant]) -> Optional[str]:
    """
    URL shown for a product in lists.

    The first image flagged main wins, scanning variants in order; otherwise
    the first image of the first variant that has any.
    """
    for variant in variants:
        for image in variant.images:
            if image.is_main:
                return image.image_url
    for variant in variants:
        if variant.images:
            return variant.images[0].image_url
    return None


def build_product_summary(product: Product) -> ProductListItem:
    """Shape a loaded product (category, variants and images loaded) as a list row."""
    variants = list(product.variants)
    prices = [float(variant.price) for variant in variants]
    return ProductListItem(
        id=product.id,
        name=product.name,
        description=product.description or "",
        category_id=product.category_id,
        category=_category_ref(product),
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
        variants_count=len(variants),
        total_quantity=sum(variant.quantity for variant in variants),
        min_price=min(prices) if prices else 0.0,
        max_price=max(prices) if prices else 0.0,
        images_count=sum(len(variant.images) for variant in variants),
        main_image=pick_main_image(variants),
    )


def build_product_detail(product: Product) -> ProductDetailResponse:
    variants = [
        VariantResponse(
            id=variant.id,
            size=variant.size,
            color=variant.color,
            sku=variant.sku or "",
            quantity=variant.quantity,
            price=float(variant.price),
            discount_price=_money(variant.discount_price),
            attributes=[VariantAttribute(name=attr.name, value=attr.value) for attr in variant.attributes],
            # sorted() is stable, so non-main images keep their position
            images=[image.image_url for image in sorted(variant.images, key=lambda image: not image.is_main)],
        )
        for variant in product.variants
    ]
    return ProductDetailResponse(
        id=product.id,
        name=product.name,
        description=product.description or "",
        category_id=product.category_id,
        category=_category_ref(product),
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
        variants=variants,
    )


def to_money(value: Optional[float]) -> Optional[Decimal]:
    """Price rounded half-up to cents as stored, or None when absent or not finite."""
    if value is None or not math.isfinite(value):
        return None
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _price_in_range(price: Optional[Decimal]) -> bool:
    return price is not None and Decimal(0) < price < MAX_PRICE


def _variant_is_valid(variant: VariantWrite) -> bool:
    if not (variant.size or "").strip() or not (variant.color or "").strip():
        return False
    if not _price_in_range(to_money(variant.price)):
        return False
    if variant.discount_price is not None and not _price_in_range(to_money(variant.discount_price)):
        return False
    return 0 <= variant.quantity <= MAX_QUANTITY


def build_variants(variants: List[VariantWrite]) -> List[ProductVariant]:
    """
    ORM variants for submitted data.

    Attribute names, values and image URLs are trimmed; attributes without a
    name and blank URLs are dropped. The first kept image of each variant is main.
    """
    rows = []
    for position, data in enumerate(variants):
        sku = (data.sku or "").strip() or None
        attributes = [(attr.name.strip(), attr.value.strip()) for attr in data.attributes if attr.name.strip()]
        urls = [url.strip() for url in data.images if url.strip()]
        rows.append(
            ProductVariant(
                size=data.size.strip(),
                color=data.color.strip(),
                sku=sku,
                quantity=data.quantity,
                price=to_money(data.price),
                discount_price=to_money(data.discount_price),
                position=position,
                attributes=[
                    ProductAttribute(name=name, value=value, position=index)
                    for index, (name, value) in enumerate(attributes)
                ],
                images=[
                    ProductImage(image_url=url, is_main=index == 0, position=index) for index, url in enumerate(urls)
                ],
            )
        )
    return rows


class ProductService:
    """Service for product-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _loaded_query(self) -> Select:
        variants = selectinload(Product.variants)
        return (
            select(Product)
            .options(
                selectinload(Product.category),
                variants.selectinload(ProductVariant.images),
                variants.selectinload(ProductVariant.attributes),
            )
            .execution_options(populate_existing=True)
        )

    async def _load(self, product_id: str) -> Product:
        result = await self.db.execute(self._loaded_query().where(Product.id == product_id))
        product = result.scalar_one_or_none()
        if product is None:
            logger.warning(f"Product {product_id} not found")
            raise ProductNotFoundError(product_id)
        return product

    async def _order_items_count(self, product_id: str) -> int:
        count = await self.db.scalar(
            select(func.count(OrderItem.id))
            .join(ProductVariant, OrderItem.variant_id == ProductVariant.id)
            .where(ProductVariant.product_id == product_id)
        )
        return count or 0

    async def _validate(self, data: ProductWrite) -> Tuple[str, str]:
        """Trimmed name and category ID of a valid submission."""
        name = (data.name or "").strip()
        if not name:
            raise ProductValidationError(message_key="ProductNameRequired")

        category_id = (data.category_id or "").strip()
        if not category_id:
            raise ProductValidationError(message_key="ProductCategoryRequired")
        if await self.db.scalar(select(Category.id).where(Category.id == category_id)) is None:
            raise ProductValidationError({"category_id": category_id}, message_key="ProductCategoryNotFound")

        if not data.variants:
            raise ProductValidationError(message_key="ProductVariantsRequired")
        for index, variant in enumerate(data.variants, start=1):
            if not _variant_is_valid(variant):
                raise ProductValidationError({"index": index}, message_key="ProductVariantInvalid")

        return name, category_id

    @time_db_query("select", "products")
    async def list_products(self) -> List[ProductListItem]:
        """All products, newest first, with values derived from their variants."""
        result = await self.db.execute(self._loaded_query().order_by(Product.created_at.desc()))
        return [build_product_summary(product) for product in result.scalars().all()]

    async def get_product(self, product_id: str) -> ProductDetailResponse:
        """A product with its variants, attributes and images."""
        return build_product_detail(await self._load(product_id))

    async def create_product(self, data: ProductWrite) -> ProductDetailResponse:
        """Create a product with its variants in a single transaction."""
        name, category_id = await self._validate(data)

        product = Product(
            name=name,
            description=(data.description or "").strip(),
            category_id=category_id,
            is_active=data.is_active,
            variants=build_variants(data.variants),
        )
        self.db.add(product)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            if await self.db.scalar(select(Category.id).where(Category.id == category_id)) is not None:
                raise
            logger.warning(f"Category {category_id} disappeared while creating product {name!r}")
            raise ProductValidationError({"category_id": category_id}, message_key="ProductCategoryNotFound") from None

        logger.info(f"Created product {product.id} ({name!r}) with {len(data.variants)} variants")
        record_business_event("product_created")
        return await self.get_product(product.id)

    async def update_product(self, product_id: str, data: ProductWrite) -> ProductDetailResponse:
        """Update product fields and replace all of its variants."""
        product = await self._load(product_id)
        name, category_id = await self._validate(data)

        order_items = await self._order_items_count(product_id)
        if order_items:
            logger.warning(f"Refused to replace variants of product {product_id}: {order_items} order items")
            raise ProductInUseError(product_id, order_items)

        with create_span("product.update", {"product.id": product_id, "variant.count": len(data.variants)}):
            product.name = name
            product.description = (data.description or "").strip()
            product.category_id = category_id
            product.is_active = data.is_active
            product.updated_at = utcnow()
            # delete-orphan removes the old variants together with their images and attributes
            product.variants = build_variants(data.variants)
            try:
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                order_items = await self._order_items_count(product_id)
                if not order_items:
                    raise
                logger.warning(f"Foreign key rejected variant replacement of product {product_id}")
                raise ProductInUseError(product_id, order_items) from None

        logger.info(f"Updated product {product_id} ({name!r}) with {len(data.variants)} variants")
        record_business_event("product_updated")
        return await self.get_product(product_id)

    async def delete_product(self, product_id: str) -> None:
        """
        Delete a product together with its variants, images and attributes.

        Products whose variants appear on an order line are kept.
        """
        exists = await self.db.scalar(select(Product.id).where(Product.id == product_id))
        if exists is None:
            logger.warning(f"Product {product_id} not found for delete")
            raise ProductNotFoundError(product_id)

        order_items = await self._order_items_count(product_id)
        if order_items:
            await self.db.rollback()
            logger.warning(f"Refused to delete product {product_id}: {order_items} order items")
            record_business_event("product_delete_blocked")
            raise ProductInUseError(product_id, order_items)

        variant_ids = select(ProductVariant.id).where(ProductVariant.product_id == product_id)
        with create_span("product.delete", {"product.id": product_id}):
            try:
                await self.db.execute(
                    delete(ProductImage)
                    .where(ProductImage.product_variant_id.in_(variant_ids))
                    .execution_options(synchronize_session=False)
                )
                await self.db.execute(
                    delete(ProductAttribute)
                    .where(ProductAttribute.product_variant_id.in_(variant_ids))
                    .execution_options(synchronize_session=False)
                )
                await self.db.execute(
                    delete(ProductVariant)
                    .where(ProductVariant.product_id == product_id)
                    .execution_options(synchronize_session=False)
                )
                await self.db.execute(
                    delete(Product).where(Product.id == product_id).execution_options(synchronize_session=False)
                )
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(f"Foreign key rejected delete of product {product_id}")
                raise ProductInUseError(product_id, await self._order_items_count(product_id)) from None

        logger.info(f"Deleted product {product_id}")
        record_business_event("product_deleted")
