"""
Tests del motor de agregación

Propiedades que valen para cualquier lote: la suma de los buckets es la
suma de las transacciones al centavo y los porcentajes suman 100.
"""

import random
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest

from app.core.config import settings
from app.modules.expenses.models import ExpenseType, RegistryType
from app.modules.orders.models import SalesChannel
from app.modules.reports.aggregation import (
    UNCATEGORIZED_KEY,
    Dimension,
    aggregate_by,
    fill_months,
    iter_months,
    month_key,
    month_start,
    percentage,
    sum_amounts,
)
from app.modules.reports.transactions import Transaction, TransactionKind


def expense(amount, category_id=None, expense_type=ExpenseType.ORDINARY, when=datetime(2024, 3, 1), **kwargs):
    return Transaction(
        id=str(uuid4()),
        source_id=uuid4(),
        occurred_at=when,
        amount=Decimal(amount),
        kind=TransactionKind.EXPENSE,
        expense_type=expense_type,
        category_id=category_id,
        **kwargs
    )


def random_expenses(rng, size, categories):
    return [
        expense(
            f"{rng.randint(1, 500000) / 100:.2f}",
            category_id=rng.choice(categories),
            expense_type=rng.choice(list(ExpenseType)),
            when=datetime(2024, rng.randint(1, 12), rng.randint(1, 28)),
            registry_type=rng.choice(list(RegistryType)),
        )
        for _ in range(size)
    ]


class TestAggregateProperties:
    """Invariantes para lotes aleatorios"""

    @pytest.mark.parametrize("seed", range(10))
    @pytest.mark.parametrize("dimension", [Dimension.CATEGORY, Dimension.EXPENSE_TYPE, Dimension.MONTH, Dimension.REGISTRY_TYPE])
    def test_bucket_sum_equals_transaction_sum(self, seed, dimension):
        rng = random.Random(seed)
        categories = [uuid4() for _ in range(4)] + [None]
        transactions = random_expenses(rng, rng.randint(1, 60), categories)

        buckets = aggregate_by(transactions, dimension)

        assert sum((b.total_amount for b in buckets), Decimal("0")) == sum_amounts(transactions)
        assert sum(b.count for b in buckets) == len(transactions)
        assert 99.9 <= sum(b.percentage_of_total for b in buckets) <= 100.1

    @pytest.mark.parametrize("seed", range(5))
    def test_unknown_keys_are_kept_in_sentinel(self, seed):
        rng = random.Random(seed)
        known, unknown = uuid4(), uuid4()
        transactions = random_expenses(rng, 30, [known, unknown, None])

        buckets = aggregate_by(transactions, Dimension.CATEGORY, labels={str(known): "Conocida"})

        assert {b.key for b in buckets} <= {str(known), UNCATEGORIZED_KEY}
        assert sum((b.total_amount for b in buckets), Decimal("0")) == sum_amounts(transactions)


class TestAggregateBy:
    """Casos concretos"""

    def test_empty_input(self):
        assert aggregate_by([], Dimension.CATEGORY) == []

    def test_ranking_order_and_ties(self):
        a, b, c = uuid4(), uuid4(), uuid4()
        labels = {str(a): "Beta", str(b): "Alfa", str(c): "Gamma"}
        transactions = [expense("10", a), expense("10", b), expense("30", c)]

        buckets = aggregate_by(transactions, Dimension.CATEGORY, labels=labels)

        assert [b.label for b in buckets] == ["Gamma", "Alfa", "Beta"]
        assert buckets[0].percentage_of_total == pytest.approx(60.0)

    def test_default_labels_for_enums(self):
        transactions = [expense("5", expense_type=ExpenseType.EXTRAORDINARY), expense("5")]
        labels = {b.key: b.label for b in aggregate_by(transactions, Dimension.EXPENSE_TYPE)}
        assert labels == {"extraordinary": "Extraordinario", "ordinary": "Ordinario"}

    def test_missing_category_goes_to_sentinel_label(self):
        buckets = aggregate_by([expense("5")], Dimension.CATEGORY)
        assert buckets[0].key == UNCATEGORIZED_KEY
        assert buckets[0].label == settings.UNCATEGORIZED_LABEL

    def test_custom_basis(self):
        buckets = aggregate_by([expense("25")], Dimension.EXPENSE_TYPE, total_basis=Decimal("200"))
        assert buckets[0].percentage_of_total == pytest.approx(12.5)

    def test_zero_basis_gives_zero_percentage(self):
        buckets = aggregate_by([expense("25")], Dimension.EXPENSE_TYPE, total_basis=Decimal("0"))
        assert buckets[0].percentage_of_total == 0.0

    def test_month_order_by_key_puts_sentinel_last(self):
        transactions = [
            expense("1", when=datetime(2024, 5, 2)),
            expense("9", when=datetime(2024, 1, 30)),
            expense("3", when=datetime(2023, 12, 31)),
        ]
        buckets = aggregate_by(transactions, Dimension.MONTH, order="key")
        assert [b.key for b in buckets] == ["2023-12", "2024-01", "2024-05"]

    def test_channel_dimension(self):
        income = Transaction(
            id="i", source_id="o", occurred_at=datetime(2024, 3, 1), amount=Decimal("7"),
            kind=TransactionKind.INCOME, channel=SalesChannel.WHOLESALE,
        )
        buckets = aggregate_by([income], Dimension.CHANNEL)
        assert (buckets[0].key, buckets[0].label) == ("wholesale", "Mayorista")


class TestMonths:
    """Tests del eje mensual"""

    def test_iter_months_crosses_year(self):
        assert iter_months(date(2023, 11, 20), date(2024, 2, 1)) == ["2023-11", "2023-12", "2024-01", "2024-02"]

    def test_iter_months_single_month(self):
        assert iter_months(date(2024, 3, 1), date(2024, 3, 31)) == ["2024-03"]

    def test_month_helpers(self):
        assert month_key(datetime(2024, 3, 9)) == "2024-03"
        assert month_start("2024-03") == date(2024, 3, 1)

    def test_fill_months_adds_zero_rows(self):
        buckets = aggregate_by([expense("4", when=datetime(2024, 2, 3))], Dimension.MONTH, order="key")
        filled = fill_months(buckets, ["2024-01", "2024-02", "2024-03"])

        assert [b.key for b in filled] == ["2024-01", "2024-02", "2024-03"]
        assert [b.total_amount for b in filled] == [Decimal("0.00"), Decimal("4"), Decimal("0.00")]
        assert [b.count for b in filled] == [0, 1, 0]


class TestPercentage:
    def test_percentage(self):
        assert percentage(Decimal("150"), Decimal("350")) == pytest.approx(42.857, abs=1e-3)
        assert percentage(Decimal("1"), Decimal("0")) == 0.0
        assert percentage(Decimal("1"), Decimal("-5")) == 0.0
