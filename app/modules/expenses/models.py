"""
Modelos SQLAlchemy para el módulo de Salidas (Expenses)

Este módulo maneja los registros de salidas de dinero:
- Métodos de pago (PaymentMethods)
- Proveedores (Suppliers), solo como fuente de autocompletado
- Salidas (Expenses)

Las salidas son la fuente de los reportes de gastos y del lado egreso
del balance mensual.
"""

from app.database.database import Base
from sqlalchemy import Column, String, DateTime, ForeignKey, Numeric, Enum, Text, Uuid
from sqlalchemy.orm import relationship
from app.common.mixins import BaseMixin, SoftDeleteMixin
import enum


# ===== ENUMS =====

class ExpenseType(enum.Enum):
    """Tipo de salida"""
    ORDINARY = "ordinary"            # Gasto operativo recurrente
    EXTRAORDINARY = "extraordinary"  # Gasto excepcional, fuera del resultado "core"


class RegistryType(enum.Enum):
    """Tipo de registro contable"""
    FORMAL = "formal"       # Con comprobante ("blanco")
    INFORMAL = "informal"   # Sin comprobante ("negro")


class Brand(enum.Enum):
    """Marca a la que se imputa la salida"""
    BARFER = "barfer"
    SLR = "slr"


# Salidas sin marca se imputan a Barfer
DEFAULT_BRAND = Brand.BARFER


# ===== MODELOS =====

class PaymentMethod(Base, BaseMixin, SoftDeleteMixin):
    __tablename__ = "payment_methods"

    name = Column(String(100), nullable=False, unique=True)

    # Relationships
    expenses = relationship("Expense", back_populates="payment_method")


class Supplier(Base, BaseMixin, SoftDeleteMixin):
    """
    Proveedores

    Solo se usan para autocompletar la carga de salidas y para mostrarlos
    junto a cada salida; los reportes no agregan por proveedor.
    """
    __tablename__ = "suppliers"

    name = Column(String(200), nullable=False, index=True)
    detail = Column(Text, nullable=True)
    registry_type = Column(Enum(RegistryType), nullable=False, default=RegistryType.FORMAL)
    preferred_category_id = Column(Uuid, ForeignKey("expense_categories.id"), nullable=True)
    preferred_payment_method_id = Column(Uuid, ForeignKey("payment_methods.id"), nullable=True)

    # Relationships
    expenses = relationship("Expense", back_populates="supplier")
    preferred_category = relationship("ExpenseCategory")
    preferred_payment_method = relationship("PaymentMethod")


class Expense(Base, BaseMixin):
    """
    Salida de dinero

    El monto siempre es positivo; el sentido lo da el tipo de registro.
    La fecha de la factura es la fecha contable de la salida.
    """
    __tablename__ = "expenses"

    invoice_date = Column(DateTime, nullable=False, index=True)
    detail = Column(String(500), nullable=False, default="")
    category_id = Column(Uuid, ForeignKey("expense_categories.id"), nullable=True, index=True)
    expense_type = Column(Enum(ExpenseType), nullable=False, default=ExpenseType.ORDINARY, index=True)
    amount = Column(Numeric(14, 2), nullable=False)
    registry_type = Column(Enum(RegistryType), nullable=False, default=RegistryType.FORMAL)
    payment_method_id = Column(Uuid, ForeignKey("payment_methods.id"), nullable=True, index=True)
    supplier_id = Column(Uuid, ForeignKey("suppliers.id"), nullable=True)
    payment_date = Column(DateTime, nullable=True)
    receipt_number = Column(String(100), nullable=True)
    brand = Column(Enum(Brand), nullable=True, index=True)

    # Relationships
    category = relationship("ExpenseCategory", back_populates="expenses")
    payment_method = relationship("PaymentMethod", back_populates="expenses")
    supplier = relationship("Supplier", back_populates="expenses")
