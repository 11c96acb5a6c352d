"""
Paginated Query Façade

Items and total always come from the same SQL statement: the page query
carries a `count(*) OVER ()` column, so a page can never disagree with the
total it is reported with.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import func

from app.core.config import settings
from app.modules.categories.models import ExpenseCategory
from app.modules.expenses.models import Expense, PaymentMethod, Supplier

logger = logging.getLogger(__name__)

SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass(frozen=True)
class SortSpec:
    field: str = "occurred_at"
    direction: str = SORT_DESC


DEFAULT_SORT = SortSpec()

# Campos ordenables del listado de salidas
EXPENSE_SORT_FIELDS = {
    "occurred_at": Expense.invoice_date,
    "amount": Expense.amount,
    "detail": Expense.detail,
    "category": ExpenseCategory.name,
    "expense_type": Expense.expense_type,
    "registry_type": Expense.registry_type,
    "payment_date": Expense.payment_date,
    "receipt_number": Expense.receipt_number,
    "supplier": Supplier.name,
    "payment_method": PaymentMethod.name,
    "brand": Expense.brand,
}

# Catálogos que hay que unir para ordenar por su nombre
SORT_JOINS = {
    "category": (ExpenseCategory, Expense.category_id == ExpenseCategory.id),
    "supplier": (Supplier, Expense.supplier_id == Supplier.id),
    "payment_method": (PaymentMethod, Expense.payment_method_id == PaymentMethod.id),
}


@dataclass
class Page:
    items: List[Any] = field(default_factory=list)
    total: int = 0
    page_count: int = 0
    page_index: int = 0
    page_size: int = 1


def normalize_page_size(page_size: Optional[int], max_page_size: Optional[int] = None) -> int:
    max_page_size = max_page_size or settings.MAX_PAGE_SIZE
    if page_size is None:
        page_size = settings.DEFAULT_PAGE_SIZE
    return max(1, min(int(page_size), max_page_size))


def page_count_for(total: int, page_size: int) -> int:
    return math.ceil(total / page_size)


def clamp_page_index(page_index: int, page_count: int) -> int:
    return min(max(int(page_index), 0), max(page_count - 1, 0))


def resolve_sort(sort: Optional[SortSpec]) -> SortSpec:
    """Unknown fields or directions fall back to the default, never an error."""
    if sort is None:
        return DEFAULT_SORT
    if sort.field not in EXPENSE_SORT_FIELDS:
        logger.debug(f"Unknown sort field {sort.field!r}, using {DEFAULT_SORT.field}")
        return DEFAULT_SORT
    direction = (sort.direction or "").lower()
    if direction not in (SORT_ASC, SORT_DESC):
        direction = DEFAULT_SORT.direction
    return SortSpec(field=sort.field, direction=direction)


def expense_sort(query, sort: Optional[SortSpec]) -> Tuple[Any, List[Any]]:
    """Query (with the join the sort needs) and ORDER BY clauses, ending with the id tie-breaker."""
    sort = resolve_sort(sort)
    column = EXPENSE_SORT_FIELDS[sort.field]
    if sort.field in SORT_JOINS:
        query = query.outerjoin(*SORT_JOINS[sort.field])

    ordered = column.asc() if sort.direction == SORT_ASC else column.desc()
    tie_breaker = Expense.id.asc() if sort.direction == SORT_ASC else Expense.id.desc()
    return query, [ordered, tie_breaker]


def paginate(query, order_by: Sequence[Any], page_index: int, page_size: int) -> Page:
    """
    One page of `query` plus its total.

    `page_index` is zero-based and clamped to the last page when a stale
    client asks past the end. The statement is only re-run in that case.
    """
    page_size = normalize_page_size(page_size)
    page_index = max(int(page_index), 0)
    windowed = query.add_columns(func.count().over().label("total_rows")).order_by(*order_by)

    for _ in range(2):
        rows = windowed.offset(page_index * page_size).limit(page_size).all()
        if rows:
            total = rows[0][-1]
            return Page(
                items=[row[0] for row in rows],
                total=total,
                page_count=page_count_for(total, page_size),
                page_index=page_index,
                page_size=page_size,
            )

        total = query.order_by(None).count()
        clamped = clamp_page_index(page_index, page_count_for(total, page_size))
        retry = total > 0 and clamped != page_index
        page_index = clamped
        if not retry:
            break

    return Page(
        items=[],
        total=total,
        page_count=page_count_for(total, page_size),
        page_index=page_index,
        page_size=page_size,
    )
