"""
Consultas de solo lectura para el módulo de Reportes

Es la única puerta al store que usan los reportes:
- Salidas con filtros y alcance de permisos aplicados en SQL
- Órdenes que cuentan como ingreso, con sus líneas
- Catálogos (categorías, métodos de pago) para etiquetas
- Permisos del usuario autenticado

Cada reporte llama a estos métodos una sola vez al comienzo y trabaja
después sobre ese snapshot en memoria.
"""

from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.modules.auth.models import User
from app.modules.categories.models import ExpenseCategory
from app.modules.expenses.models import Expense, PaymentMethod
from app.modules.orders.models import Order, INCOME_STATUSES
from .permissions import PermissionScope, apply_scope
from .schemas import ExpenseFilters


def _day_start(value: date) -> datetime:
    return datetime.combine(value, time.min)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ReportCrud:
    """Consultas de lectura para reportes"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def order_date_column():
        """Entrega si existe, si no creación; misma regla que order_occurred_at."""
        return func.coalesce(Order.delivery_date, Order.created_at)

    @staticmethod
    def _apply_date_range(query, column, start_date: Optional[date], end_date: Optional[date]):
        """Rango inclusivo por día: [start 00:00, end + 1 día 00:00)"""
        if start_date is not None:
            query = query.filter(column >= _day_start(start_date))
        if end_date is not None:
            query = query.filter(column < _day_start(end_date + timedelta(days=1)))
        return query

    def expenses_query(self, filters: ExpenseFilters, scope: PermissionScope):
        """Consulta base de salidas con alcance y filtros; sin orden ni paginación."""
        query = self.db.query(Expense)
        query = apply_scope(scope, query, Expense.category_id)
        query = self._apply_date_range(query, Expense.invoice_date, filters.start_date, filters.end_date)

        if filters.category_id:
            query = query.filter(Expense.category_id == filters.category_id)
        if filters.payment_method_id:
            query = query.filter(Expense.payment_method_id == filters.payment_method_id)
        if filters.supplier_id:
            query = query.filter(Expense.supplier_id == filters.supplier_id)
        if filters.expense_type:
            query = query.filter(Expense.expense_type == filters.expense_type)
        if filters.registry_type:
            query = query.filter(Expense.registry_type == filters.registry_type)
        if filters.brand:
            query = query.filter(Expense.brand == filters.brand)
        if filters.search_term and filters.search_term.strip():
            pattern = f"%{_escape_like(filters.search_term.strip())}%"
            query = query.filter(Expense.detail.ilike(pattern, escape="\\"))

        return query

    def fetch_expenses(self, filters: ExpenseFilters, scope: PermissionScope) -> List[Expense]:
        return self.expenses_query(filters, scope).all()

    def fetch_orders(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> List[Order]:
        """Órdenes confirmadas o entregadas en el rango, con sus líneas."""
        query = self.db.query(Order).options(selectinload(Order.items)).filter(
            Order.status.in_(INCOME_STATUSES)
        )
        query = self._apply_date_range(query, self.order_date_column(), start_date, end_date)
        return query.all()

    def fetch_categories(self) -> List[ExpenseCategory]:
        """Todas, también las desactivadas: sus salidas históricas se siguen mostrando."""
        return self.db.query(ExpenseCategory).order_by(ExpenseCategory.name).all()

    def fetch_payment_methods(self) -> List[PaymentMethod]:
        return self.db.query(PaymentMethod).order_by(PaymentMethod.name).all()

    def category_labels(self, scope: PermissionScope) -> Dict[str, str]:
        return {
            str(category.id): category.name
            for category in self.fetch_categories()
            if scope.allows(category.id)
        }

    def payment_method_labels(self) -> Dict[str, str]:
        return {str(method.id): method.name for method in self.fetch_payment_methods()}

    def get_user_permissions(self, user_id: UUID) -> Optional[List[str]]:
        """None si el usuario no existe o está inactivo."""
        user = self.db.query(User).filter(User.id == user_id).first()
        if user is None or not user.is_active:
            return None
        return [p for p in (user.permissions or []) if isinstance(p, str)]
