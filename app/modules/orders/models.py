"""
Modelos SQLAlchemy para órdenes de venta

Solo la parte que consumen los reportes: la orden con su canal, estado y
fechas, y sus líneas. El checkout que las crea vive fuera de este servicio.
"""

from app.database.database import Base
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Enum, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4
from app.common.mixins import BaseMixin, TimestampMixin
import enum


class OrderStatus(enum.Enum):
    """Estados de órdenes"""
    PENDING = "pending"       # Pendiente
    CONFIRMED = "confirmed"   # Confirmada
    DELIVERED = "delivered"   # Entregada
    CANCELLED = "cancelled"   # Cancelada


class SalesChannel(enum.Enum):
    """Canal de venta"""
    RETAIL = "retail"         # Minorista
    WHOLESALE = "wholesale"   # Mayorista
    EXPRESS = "express"       # Envío express


# Estados que cuentan como ingreso
INCOME_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.DELIVERED)


class Order(Base, BaseMixin):
    __tablename__ = "orders"

    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING, index=True)
    order_type = Column(Enum(SalesChannel), nullable=False, default=SalesChannel.RETAIL)
    delivery_date = Column(DateTime, nullable=True, index=True)
    shipping_price = Column(Numeric(14, 2), nullable=False, default=0)
    total = Column(Numeric(14, 2), nullable=False, default=0)  # Solo para mostrar; el ingreso sale de las líneas + envío

    # Relationships
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base, TimestampMixin):
    __tablename__ = "order_items"

    id = Column(Uuid, primary_key=True, default=uuid4)
    order_id = Column(Uuid, ForeignKey("orders.id"), nullable=False, index=True)

    product_name = Column(String(200), nullable=False)
    quantity = Column(Numeric(10, 3), nullable=False)
    unit_price = Column(Numeric(14, 2), nullable=False)
    channel = Column(Enum(SalesChannel), nullable=True)  # Cae al order_type de la orden

    # Relationships
    order = relationship("Order", back_populates="items")
