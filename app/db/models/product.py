"""
Database models for products, their variants, images and attributes.
"""

from uuid import uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.db.models.base import UTCDateTime, utcnow
from app.db.session import Base


class Product(Base):
    """
    Database model for products.
    """

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    category_id = Column(
        String(36),
        ForeignKey("categories.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    is_active = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    category = relationship("Category", back_populates="products")
    variants = relationship(
        "ProductVariant",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProductVariant.position",
    )


class ProductVariant(Base):
    """
    A purchasable configuration (size/color) of a product.
    """

    __tablename__ = "product_variants"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_product_variants_quantity"),
        CheckConstraint("price > 0", name="ck_product_variants_price"),
    )

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    size = Column(String(100), nullable=False)
    color = Column(String(100), nullable=False)
    sku = Column(String(100), nullable=True)
    quantity = Column(Integer, nullable=False, default=0)
    price = Column(Numeric(10, 2), nullable=False)
    discount_price = Column(Numeric(10, 2), nullable=True)
    # Keeps variants in the order they were submitted
    position = Column(Integer, nullable=False, default=0)

    # Relationships
    product = relationship("Product", back_populates="variants")
    images = relationship(
        "ProductImage",
        back_populates="variant",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProductImage.position",
    )
    attributes = relationship(
        "ProductAttribute",
        back_populates="variant",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProductAttribute.position",
    )


class ProductImage(Base):
    """
    Image URL attached to a variant; at most one per variant is flagged main.
    """

    __tablename__ = "product_images"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    product_variant_id = Column(
        String(36), ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    image_url = Column(Text, nullable=False)
    is_main = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)

    variant = relationship("ProductVariant", back_populates="images")


class ProductAttribute(Base):
    """
    Free-form name/value pair of a variant.
    """

    __tablename__ = "product_attributes"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    product_variant_id = Column(
        String(36), ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(255), nullable=False)
    value = Column(Text, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    variant = relationship("ProductVariant", back_populates="attributes")
