from sqlalchemy import Column, String, Index, text
from sqlalchemy.orm import relationship, validates

from app.database.database import Base
from app.common.mixins import BaseMixin, SoftDeleteMixin


def normalize_category_name(name: str) -> str:
    """Clave de unicidad: sin espacios extremos, espacios internos colapsados, casefold."""
    return " ".join((name or "").split()).casefold()


class ExpenseCategory(Base, BaseMixin, SoftDeleteMixin):
    """Categoría de salidas. Eliminar = desactivar; las salidas existentes la siguen referenciando."""
    __tablename__ = "expense_categories"

    name = Column(String(100), nullable=False)
    normalized_name = Column(String(100), nullable=False, index=True)

    # Relationships
    expenses = relationship("Expense", back_populates="category")

    __table_args__ = (
        # Nombre único solo entre categorías activas
        Index(
            "uq_expense_categories_active_name", "normalized_name", unique=True,
            postgresql_where=text("is_active"), sqlite_where=text("is_active = 1")
        ),
    )

    @validates("name")
    def _sync_normalized_name(self, key, value):
        self.normalized_name = normalize_category_name(value)
        return value
