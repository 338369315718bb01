"""
Database models.
"""

from app.db.models.category import Category
from app.db.models.order import (
    ContactType,
    Order,
    OrderItem,
    OrderStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
)
from app.db.models.product import Product, ProductAttribute, ProductImage, ProductVariant

__all__ = [
    "Category",
    "ContactType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "ProductAttribute",
    "ProductImage",
    "ProductVariant",
]
