"""
Overview Summarizer

Top-level spend summary composed from the aggregation engine.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Sequence

from app.modules.expenses.models import ExpenseType, RegistryType
from .aggregation import ZERO, Dimension, aggregate_by, sum_amounts
from .transactions import CENTS, Transaction


@dataclass(frozen=True)
class ShareSummary:
    amount: Decimal
    count: int
    percentage: float


@dataclass(frozen=True)
class OverviewSummary:
    total_spend: Decimal
    total_count: int
    average_spend: Decimal
    ordinary: ShareSummary
    extraordinary: ShareSummary


@dataclass(frozen=True)
class MonthlyStats:
    total_count: int
    total_amount: Decimal
    ordinary_count: int
    extraordinary_count: int
    ordinary_amount: Decimal
    extraordinary_amount: Decimal
    formal_count: int
    informal_count: int
    formal_amount: Decimal
    informal_amount: Decimal


EMPTY_SHARE = ShareSummary(amount=ZERO, count=0, percentage=0.0)


def _shares(transactions: Sequence[Transaction], dimension: Dimension) -> Dict[str, ShareSummary]:
    return {
        bucket.key: ShareSummary(
            amount=bucket.total_amount,
            count=bucket.count,
            percentage=bucket.percentage_of_total,
        )
        for bucket in aggregate_by(transactions, dimension)
    }


def summarize(transactions: Sequence[Transaction]) -> OverviewSummary:
    """Total, promedio y reparto ordinario/extraordinario de las salidas."""
    expenses = [t for t in transactions if t.is_expense]
    total_spend = sum_amounts(expenses)
    total_count = sum(t.count for t in expenses)

    if total_count:
        average_spend = (total_spend / total_count).quantize(CENTS, rounding=ROUND_HALF_UP)
    else:
        average_spend = ZERO

    by_type = _shares(expenses, Dimension.EXPENSE_TYPE)
    return OverviewSummary(
        total_spend=total_spend,
        total_count=total_count,
        average_spend=average_spend,
        ordinary=by_type.get(ExpenseType.ORDINARY.value, EMPTY_SHARE),
        extraordinary=by_type.get(ExpenseType.EXTRAORDINARY.value, EMPTY_SHARE),
    )


def monthly_stats(transactions: Sequence[Transaction]) -> MonthlyStats:
    """Conteos y montos por tipo de salida y tipo de registro."""
    expenses = [t for t in transactions if t.is_expense]
    by_type = _shares(expenses, Dimension.EXPENSE_TYPE)
    by_registry = _shares(expenses, Dimension.REGISTRY_TYPE)

    ordinary = by_type.get(ExpenseType.ORDINARY.value, EMPTY_SHARE)
    extraordinary = by_type.get(ExpenseType.EXTRAORDINARY.value, EMPTY_SHARE)
    formal = by_registry.get(RegistryType.FORMAL.value, EMPTY_SHARE)
    informal = by_registry.get(RegistryType.INFORMAL.value, EMPTY_SHARE)

    return MonthlyStats(
        total_count=sum(t.count for t in expenses),
        total_amount=sum_amounts(expenses),
        ordinary_count=ordinary.count,
        extraordinary_count=extraordinary.count,
        ordinary_amount=ordinary.amount,
        extraordinary_amount=extraordinary.amount,
        formal_count=formal.count,
        informal_count=informal.count,
        formal_amount=formal.amount,
        informal_amount=informal.amount,
    )
