"""
Aggregation Engine

Pure grouping of canonical transactions by one dimension, with sum, count
and percentage of a basis. Shared by every report type.

Nothing is ever dropped: a transaction whose key is missing or unknown lands
in the "Sin categoría" bucket, so the bucket amounts always add up to the
amount of the transactions passed in.
"""

import enum
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from app.core.config import settings
from app.modules.expenses.models import Brand, ExpenseType, RegistryType
from app.modules.orders.models import SalesChannel
from .transactions import Transaction

ZERO = Decimal("0.00")
UNCATEGORIZED_KEY = "uncategorized"


class Dimension(enum.Enum):
    CATEGORY = "category"
    EXPENSE_TYPE = "expense_type"
    MONTH = "month"
    CHANNEL = "channel"
    REGISTRY_TYPE = "registry_type"
    PAYMENT_METHOD = "payment_method"
    BRAND = "brand"


DEFAULT_LABELS: Dict[Dimension, Dict[str, str]] = {
    Dimension.EXPENSE_TYPE: {
        ExpenseType.ORDINARY.value: "Ordinario",
        ExpenseType.EXTRAORDINARY.value: "Extraordinario",
    },
    Dimension.CHANNEL: {
        SalesChannel.RETAIL.value: "Minorista",
        SalesChannel.WHOLESALE.value: "Mayorista",
        SalesChannel.EXPRESS.value: "Express",
    },
    Dimension.REGISTRY_TYPE: {
        RegistryType.FORMAL.value: "Blanco",
        RegistryType.INFORMAL.value: "Negro",
    },
    Dimension.BRAND: {
        Brand.BARFER.value: "Barfer",
        Brand.SLR.value: "SLR",
    },
}


@dataclass(frozen=True)
class AggregateBucket:
    key: str
    label: str
    total_amount: Decimal
    count: int
    percentage_of_total: float


def month_key(value: datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def _enum_key(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value.value if isinstance(value, enum.Enum) else str(value)


def _id_key(value: Any) -> Optional[str]:
    return None if value is None else str(value)


_KEY_FUNCTIONS: Dict[Dimension, Callable[[Transaction], Optional[str]]] = {
    Dimension.CATEGORY: lambda t: _id_key(t.category_id),
    Dimension.EXPENSE_TYPE: lambda t: _enum_key(t.expense_type),
    Dimension.MONTH: lambda t: month_key(t.occurred_at),
    Dimension.CHANNEL: lambda t: _enum_key(t.channel),
    Dimension.REGISTRY_TYPE: lambda t: _enum_key(t.registry_type),
    Dimension.PAYMENT_METHOD: lambda t: _id_key(t.payment_method_id),
    Dimension.BRAND: lambda t: _enum_key(t.brand),
}


def sum_amounts(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def percentage(part: Decimal, basis: Decimal) -> float:
    """part / basis * 100; a non-positive basis gives 0, never a division error."""
    if basis is None or basis <= 0:
        return 0.0
    return float(Decimal(part) / Decimal(basis) * 100)


def ranking_sort_key(bucket: AggregateBucket):
    return (-bucket.total_amount, bucket.label, bucket.key)


def aggregate_by(
    transactions: Sequence[Transaction],
    dimension: Dimension,
    total_basis: Optional[Decimal] = None,
    labels: Optional[Mapping[str, str]] = None,
    order: str = "amount",
) -> List[AggregateBucket]:
    """
    Group transactions by `dimension`.

    Args:
        transactions: Canonical transactions, already scoped.
        dimension: Grouping dimension.
        total_basis: Percentage denominator. Defaults to the sum of
            `transactions`; pass another total for e.g. expense as % of income.
        labels: key -> display label. When given, keys missing from it are
            treated as unmatched and go to the sentinel bucket.
        order: "amount" ranks by total desc then label asc; "key" sorts by key.

    Returns:
        List of AggregateBucket
    """
    key_function = _KEY_FUNCTIONS[dimension]
    default_labels = DEFAULT_LABELS.get(dimension, {})
    basis = sum_amounts(transactions) if total_basis is None else Decimal(total_basis)

    totals: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    bucket_labels: Dict[str, str] = {}

    for transaction in transactions:
        key = key_function(transaction)
        if key is not None and labels is not None and key not in labels:
            key = None

        if key is None:
            key = UNCATEGORIZED_KEY
            label = settings.UNCATEGORIZED_LABEL
        elif labels is not None:
            label = labels[key]
        else:
            label = default_labels.get(key, key)

        totals[key] = totals.get(key, ZERO) + transaction.amount
        counts[key] = counts.get(key, 0) + transaction.count
        bucket_labels[key] = label

    buckets = [
        AggregateBucket(
            key=key,
            label=bucket_labels[key],
            total_amount=amount,
            count=counts[key],
            percentage_of_total=percentage(amount, basis),
        )
        for key, amount in totals.items()
    ]

    if order == "key":
        # Sentinel bucket always last
        buckets.sort(key=lambda b: (b.key == UNCATEGORIZED_KEY, b.key))
    else:
        buckets.sort(key=ranking_sort_key)
    return buckets


def iter_months(start: date, end: date) -> List[str]:
    """Month keys from start to end, both inclusive."""
    months = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        months.append(f"{year:04d}-{month:02d}")
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return months


def month_start(month: str) -> date:
    year, month_number = month.split("-")
    return date(int(year), int(month_number), 1)


def fill_months(buckets: Sequence[AggregateBucket], months: Sequence[str]) -> List[AggregateBucket]:
    """Monthly buckets on a continuous axis; months without activity are zero rows."""
    by_key = {bucket.key: bucket for bucket in buckets}
    filled = []
    for month in months:
        bucket = by_key.pop(month, None)
        filled.append(bucket or AggregateBucket(
            key=month, label=month, total_amount=ZERO, count=0, percentage_of_total=0.0
        ))
    # Months outside the axis are kept so totals still reconcile
    filled.extend(sorted(by_key.values(), key=lambda b: b.key))
    return filled
