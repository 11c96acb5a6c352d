"""
Fixtures compartidos para los tests de Reportes

Base SQLite en memoria (StaticPool) con el esquema completo, un TestClient
cuyo get_report_db apunta a esa base, y usuarios reales con permisos que se
autentican con un JWT firmado con la clave de la configuración.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")

from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.database.database import Base, get_report_db
from app.main import app
from app.modules.auth.models import User
from app.modules.categories.models import ExpenseCategory
from app.modules.expenses.models import Expense, ExpenseType, PaymentMethod, RegistryType, Supplier
from app.modules.orders.models import Order, OrderItem, OrderStatus, SalesChannel


engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ===== BASE DE DATOS =====

@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    def override_get_report_db():
        yield db_session

    app.dependency_overrides[get_report_db] = override_get_report_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ===== AUTENTICACIÓN =====

@pytest.fixture
def make_user(db_session):
    """Crea un usuario con los permisos dados y devuelve sus headers Bearer"""
    def _make_user(permissions, is_active=True):
        user = User(email=f"{uuid4().hex}@example.com", is_active=is_active, permissions=list(permissions))
        db_session.add(user)
        db_session.commit()
        token = jwt.encode({"sub": str(user.id)}, settings.APP_SECRET_STRING, algorithm=settings.ALGORITHM)
        return {"Authorization": f"Bearer {token}"}
    return _make_user


@pytest.fixture
def admin_headers(make_user):
    return make_user([
        settings.PERMISSION_ALL_CATEGORIES,
        settings.PERMISSION_VIEW_BALANCE,
        settings.PERMISSION_VIEW_STATISTICS,
        settings.PERMISSION_VIEW_EXPENSES,
    ])


# ===== DATOS =====

@pytest.fixture
def add_category(db_session):
    def _add_category(name):
        category = ExpenseCategory(name=name)
        db_session.add(category)
        db_session.commit()
        return category
    return _add_category


@pytest.fixture
def add_expense(db_session):
    def _add_expense(
        amount,
        invoice_date,
        category=None,
        expense_type=ExpenseType.ORDINARY,
        registry_type=RegistryType.FORMAL,
        detail="",
        payment_method=None,
        supplier=None,
        brand=None,
    ):
        expense = Expense(
            amount=Decimal(str(amount)),
            invoice_date=invoice_date,
            category_id=category.id if category is not None else None,
            expense_type=expense_type,
            registry_type=registry_type,
            detail=detail,
            payment_method_id=payment_method.id if payment_method is not None else None,
            supplier_id=supplier.id if supplier is not None else None,
            brand=brand,
        )
        db_session.add(expense)
        db_session.commit()
        return expense
    return _add_expense


@pytest.fixture
def add_order(db_session):
    def _add_order(
        lines,
        created_at,
        delivery_date=None,
        order_type=SalesChannel.RETAIL,
        status=OrderStatus.DELIVERED,
        shipping_price=0,
    ):
        """`lines` es una lista de (cantidad, precio unitario)"""
        order = Order(
            status=status,
            order_type=order_type,
            created_at=created_at,
            updated_at=created_at,
            delivery_date=delivery_date,
            shipping_price=Decimal(str(shipping_price)),
            total=sum((Decimal(str(q)) * Decimal(str(p)) for q, p in lines), Decimal("0")),
        )
        order.items = [
            OrderItem(product_name=f"Producto {i}", quantity=Decimal(str(q)), unit_price=Decimal(str(p)))
            for i, (q, p) in enumerate(lines)
        ]
        db_session.add(order)
        db_session.commit()
        return order
    return _add_order


@pytest.fixture
def payment_method(db_session):
    method = PaymentMethod(name="Efectivo")
    db_session.add(method)
    db_session.commit()
    return method


@pytest.fixture
def supplier(db_session):
    item = Supplier(name="Distribuidora Norte", registry_type=RegistryType.FORMAL)
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def march_store(add_category, add_expense, add_order):
    """Supplies 100 + 50 ordinarias, Rent 200 extraordinaria y una venta minorista de 500, todo en marzo"""
    supplies = add_category("Supplies")
    rent = add_category("Rent")
    add_expense(100, datetime(2024, 3, 5), supplies, detail="Cajas")
    add_expense(50, datetime(2024, 3, 12), supplies, detail="Cinta")
    add_expense(200, datetime(2024, 3, 1), rent, ExpenseType.EXTRAORDINARY, RegistryType.INFORMAL, detail="Alquiler")
    add_order([(1, 500)], created_at=datetime(2024, 3, 10), delivery_date=datetime(2024, 3, 15))
    return {"supplies": supplies, "rent": rent}
