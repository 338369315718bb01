"""
Database models for orders, order lines and payments.

Order lines capture the variant price at purchase time and restrict deletion
of the variant they reference.
"""

from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from app.db.models.base import UTCDateTime, utcnow
from app.db.session import Base


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    SHIPPED = "SHIPPED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ContactType(str, Enum):
    WHATSAPP = "WHATSAPP"
    CALL = "CALL"


class PaymentMethod(str, Enum):
    CARD = "CARD"
    WALLET = "WALLET"
    MBANK = "MBANK"
    ELCART = "ELCART"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class Order(Base):
    """Customer order."""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    order_number = Column(String(64), nullable=False, unique=True)
    total_price = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    customer_name = Column(String(255), nullable=False)
    customer_phone = Column(String(50), nullable=False)
    contact_type = Column(String(20), nullable=False)
    customer_address = Column(Text, nullable=False)

    # Timestamps
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime(), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", passive_deletes=True)
    payment = relationship("Payment", back_populates="order", uselist=False)


class OrderItem(Base):
    """Order line referencing a variant at time of purchase."""

    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    variant_id = Column(
        String(36), ForeignKey("product_variants.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")


class Payment(Base):
    """Payment, one per order."""

    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid4()))
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="RESTRICT"), nullable=False, unique=True)
    payment_method = Column(String(20), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    transaction_id = Column(String(255), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False, default=utcnow)

    order = relationship("Order", back_populates="payment")
