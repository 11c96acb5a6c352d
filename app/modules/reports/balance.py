"""
Balance Calculator

Monthly sales balance: income per channel against ordinary and
extraordinary expenses, with the two net results ("core" without
extraordinary items, and full).
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Sequence

from app.modules.expenses.models import Brand, ExpenseType
from app.modules.orders.models import SalesChannel
from .aggregation import (
    ZERO, Dimension, aggregate_by, iter_months, month_key, percentage
)
from .transactions import CENTS, Transaction


@dataclass(frozen=True)
class MonthlyBalanceRow:
    month: str
    retail_income: Decimal
    retail_orders: int
    wholesale_income: Decimal
    wholesale_orders: int
    express_income: Decimal
    express_orders: int
    total_income: Decimal
    total_orders: int
    ordinary_expense: Decimal
    ordinary_expense_barfer: Decimal
    ordinary_expense_slr: Decimal
    extraordinary_expense: Decimal
    extraordinary_expense_barfer: Decimal
    extraordinary_expense_slr: Decimal
    total_expense: Decimal
    expense_percentage: float
    net_without_extraordinary: Decimal
    net_with_extraordinary: Decimal
    net_without_extraordinary_percentage: float
    net_with_extraordinary_percentage: float
    total_weight_kg: Decimal
    price_per_kg: Decimal


def _channel_orders(income: Sequence[Transaction]) -> Dict[SalesChannel, int]:
    """Órdenes distintas por canal; una orden con varias líneas cuenta una vez."""
    seen = {channel: set() for channel in SalesChannel}
    for transaction in income:
        seen[transaction.channel].add(transaction.source_id)
    return {channel: len(ids) for channel, ids in seen.items()}


def _brand_amount(expenses: Sequence[Transaction], expense_type: ExpenseType, brand: Brand) -> Decimal:
    """Monto de un tipo de salida imputado a una marca. Sin marca cuenta como Barfer."""
    of_type = [t for t in expenses if t.expense_type is expense_type]
    by_brand = {b.key: b.total_amount for b in aggregate_by(of_type, Dimension.BRAND)}
    return by_brand.get(brand.value, ZERO)


def build_month_row(month: str, transactions: Sequence[Transaction]) -> MonthlyBalanceRow:
    """Fila de balance para las transacciones de un mes."""
    income = [t for t in transactions if t.is_income]
    expenses = [t for t in transactions if t.is_expense]

    by_channel = {b.key: b.total_amount for b in aggregate_by(income, Dimension.CHANNEL)}
    by_type = {b.key: b.total_amount for b in aggregate_by(expenses, Dimension.EXPENSE_TYPE)}
    orders = _channel_orders(income)

    retail = by_channel.get(SalesChannel.RETAIL.value, ZERO)
    wholesale = by_channel.get(SalesChannel.WHOLESALE.value, ZERO)
    express = by_channel.get(SalesChannel.EXPRESS.value, ZERO)
    total_income = retail + wholesale + express

    ordinary = by_type.get(ExpenseType.ORDINARY.value, ZERO)
    extraordinary = by_type.get(ExpenseType.EXTRAORDINARY.value, ZERO)
    ordinary_slr = _brand_amount(expenses, ExpenseType.ORDINARY, Brand.SLR)
    extraordinary_slr = _brand_amount(expenses, ExpenseType.EXTRAORDINARY, Brand.SLR)

    total_weight = sum((t.weight_kg for t in income), Decimal("0"))
    if total_weight > 0:
        price_per_kg = (total_income / total_weight).quantize(CENTS, rounding=ROUND_HALF_UP)
    else:
        price_per_kg = ZERO

    net_without_extraordinary = total_income - ordinary
    net_with_extraordinary = net_without_extraordinary - extraordinary

    return MonthlyBalanceRow(
        month=month,
        retail_income=retail,
        retail_orders=orders[SalesChannel.RETAIL],
        wholesale_income=wholesale,
        wholesale_orders=orders[SalesChannel.WHOLESALE],
        express_income=express,
        express_orders=orders[SalesChannel.EXPRESS],
        total_income=total_income,
        total_orders=len({t.source_id for t in income}),
        ordinary_expense=ordinary,
        ordinary_expense_barfer=ordinary - ordinary_slr,
        ordinary_expense_slr=ordinary_slr,
        extraordinary_expense=extraordinary,
        extraordinary_expense_barfer=extraordinary - extraordinary_slr,
        extraordinary_expense_slr=extraordinary_slr,
        total_expense=ordinary + extraordinary,
        expense_percentage=percentage(ordinary + extraordinary, total_income),
        net_without_extraordinary=net_without_extraordinary,
        net_with_extraordinary=net_with_extraordinary,
        net_without_extraordinary_percentage=percentage(net_without_extraordinary, total_income),
        net_with_extraordinary_percentage=percentage(net_with_extraordinary, total_income),
        total_weight_kg=total_weight,
        price_per_kg=price_per_kg,
    )


def calculate_monthly_balance(
    transactions: Sequence[Transaction],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[MonthlyBalanceRow]:
    """
    One row per calendar month in [start_date, end_date].

    Months without activity are still returned as zero rows so charts keep a
    continuous time axis. Without an explicit range the span of the given
    transactions is used; no transactions and no range means no rows.
    """
    if start_date is None or end_date is None:
        if not transactions:
            return []
        first = min(t.occurred_at for t in transactions).date()
        last = max(t.occurred_at for t in transactions).date()
        start_date = start_date or first
        end_date = end_date or last
        if end_date < start_date:
            return []

    months = iter_months(start_date, end_date)
    by_month: Dict[str, List[Transaction]] = {month: [] for month in months}
    for transaction in transactions:
        key = month_key(transaction.occurred_at)
        if key in by_month:
            by_month[key].append(transaction)

    return [build_month_row(month, by_month[month]) for month in months]


def balance_totals(rows: Sequence[MonthlyBalanceRow]) -> Dict[str, Decimal]:
    """Totales del período para el pie de la tabla."""
    total_income = sum((r.total_income for r in rows), ZERO)
    ordinary = sum((r.ordinary_expense for r in rows), ZERO)
    extraordinary = sum((r.extraordinary_expense for r in rows), ZERO)
    return {
        "total_income": total_income,
        "ordinary_expense": ordinary,
        "extraordinary_expense": extraordinary,
        "net_without_extraordinary": total_income - ordinary,
        "net_with_extraordinary": total_income - ordinary - extraordinary,
    }

