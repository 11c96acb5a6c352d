"""
Tests del normalizador de transacciones

- Salidas y órdenes se convierten a la misma forma canónica
- Montos inválidos descartan el registro, no el lote
- Fecha contable de órdenes: entrega, si no creación
"""

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.modules.expenses.models import Brand, ExpenseType, RegistryType
from app.modules.orders.models import SalesChannel
from app.modules.reports.exceptions import InvalidAmount
from app.modules.reports.transactions import (
    Transaction,
    TransactionKind,
    item_weight_kg,
    normalize_expense,
    normalize_expenses,
    normalize_order,
    normalize_orders,
    order_occurred_at,
    to_amount,
)


def make_expense(amount="10.00", **overrides):
    values = dict(
        id=uuid4(),
        amount=amount,
        invoice_date=datetime(2024, 3, 5),
        expense_type=ExpenseType.ORDINARY,
        category_id=uuid4(),
        payment_method_id=None,
        registry_type=RegistryType.FORMAL,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def make_order(items, **overrides):
    values = dict(
        id=uuid4(),
        order_type=SalesChannel.RETAIL,
        created_at=datetime(2024, 3, 1, 9, 30),
        delivery_date=None,
        shipping_price=Decimal("0"),
        items=[SimpleNamespace(quantity=q, unit_price=p, channel=c) for q, p, c in items],
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestAmounts:
    """Tests de conversión de montos"""

    def test_to_amount_quantizes_to_cents(self):
        assert to_amount("10.005") == Decimal("10.01")
        assert to_amount(3) == Decimal("3.00")
        assert to_amount(0.1) == Decimal("0.10")

    def test_to_amount_rejects_garbage(self):
        with pytest.raises(InvalidAmount):
            to_amount("abc", "x")
        with pytest.raises(InvalidAmount):
            to_amount(None, "x")

    def test_transaction_rejects_negative_amount(self):
        with pytest.raises(InvalidAmount):
            Transaction(
                id="t", source_id="s", occurred_at=datetime(2024, 1, 1), amount=Decimal("-1"),
                kind=TransactionKind.EXPENSE, expense_type=ExpenseType.ORDINARY,
            )

    def test_income_requires_channel(self):
        with pytest.raises(ValueError):
            Transaction(
                id="t", source_id="s", occurred_at=datetime(2024, 1, 1), amount=Decimal("1"),
                kind=TransactionKind.INCOME,
            )


class TestNormalizeExpense:
    """Tests de salidas"""

    def test_expense_becomes_expense_transaction(self):
        raw = make_expense("150.5", registry_type="informal")
        transaction = normalize_expense(raw)

        assert transaction.is_expense
        assert transaction.amount == Decimal("150.50")
        assert transaction.source_id == raw.id
        assert transaction.category_id == raw.category_id
        assert transaction.registry_type is RegistryType.INFORMAL
        assert transaction.occurred_at == raw.invoice_date

    def test_missing_expense_type_defaults_to_ordinary(self):
        transaction = normalize_expense(make_expense(expense_type=None))
        assert transaction.expense_type is ExpenseType.ORDINARY

    def test_expense_type_accepts_member_name(self):
        transaction = normalize_expense(make_expense(expense_type="EXTRAORDINARY"))
        assert transaction.expense_type is ExpenseType.EXTRAORDINARY

    @pytest.mark.parametrize("brand, expected", [
        (None, Brand.BARFER),
        ("SLR", Brand.SLR),
        ("slr", Brand.SLR),
        (Brand.BARFER, Brand.BARFER),
        ("otra marca", Brand.BARFER),
    ])
    def test_brand_defaults_to_barfer(self, brand, expected):
        assert normalize_expense(make_expense(brand=brand)).brand is expected

    def test_invoice_date_as_date(self):
        transaction = normalize_expense(make_expense(invoice_date=date(2024, 3, 5)))
        assert transaction.occurred_at == datetime(2024, 3, 5)

    @pytest.mark.parametrize("amount", ["0", "-5", None, "n/a"])
    def test_non_positive_or_invalid_amount_raises(self, amount):
        with pytest.raises(InvalidAmount):
            normalize_expense(make_expense(amount))

    def test_batch_skips_only_the_bad_record(self, caplog):
        good = make_expense("20")
        bad = make_expense("-3")
        result = normalize_expenses([good, bad, make_expense("5")])

        assert len(result.transactions) == 2
        assert result.skipped_count == 1
        assert result.skipped[0].record_id == bad.id
        assert "invalid amount" in caplog.text


class TestItemWeight:
    """Tests del peso estimado por producto"""

    @pytest.mark.parametrize("name, expected", [
        ("Pollo 10 KG", Decimal("10")),
        ("Carne 2,5 kg", Decimal("2.5")),
        ("BIG DOG Pollo", Decimal("15")),
        ("Complemento Huesos", Decimal("0")),
        ("Caja sorpresa", Decimal("8")),
        (None, Decimal("8")),
    ])
    def test_weight_from_product_name(self, name, expected):
        assert item_weight_kg(name) == expected

    def test_line_weight_scales_with_quantity(self):
        raw = make_order([(3, "10", None)], shipping_price=Decimal("2"))
        raw.items[0].product_name = "Pollo 5 KG"
        line, shipping = normalize_order(raw)

        assert line.weight_kg == Decimal("15")
        assert shipping.weight_kg == Decimal("0")


class TestNormalizeOrder:
    """Tests de órdenes"""

    def test_one_transaction_per_line_plus_shipping(self):
        raw = make_order(
            [(2, "10.00", None), (1, "5.50", SalesChannel.EXPRESS)],
            shipping_price=Decimal("3.00"),
        )
        transactions = normalize_order(raw)

        assert [t.amount for t in transactions] == [Decimal("20.00"), Decimal("5.50"), Decimal("3.00")]
        assert [t.channel for t in transactions] == [
            SalesChannel.RETAIL, SalesChannel.EXPRESS, SalesChannel.RETAIL
        ]
        assert all(t.is_income and t.source_id == raw.id for t in transactions)
        assert len({t.id for t in transactions}) == 3

    def test_no_shipping_transaction_when_free(self):
        transactions = normalize_order(make_order([(1, "8", None)]))
        assert len(transactions) == 1

    def test_occurred_at_prefers_delivery_date(self):
        delivered = make_order([(1, "8", None)], delivery_date=datetime(2024, 4, 2))
        pending = make_order([(1, "8", None)])

        assert order_occurred_at(delivered) == datetime(2024, 4, 2)
        assert order_occurred_at(pending) == datetime(2024, 3, 1, 9, 30)
        assert {t.occurred_at for t in normalize_order(delivered)} == {datetime(2024, 4, 2)}

    def test_order_type_string_is_accepted(self):
        transactions = normalize_order(make_order([(1, "8", None)], order_type="wholesale"))
        assert transactions[0].channel is SalesChannel.WHOLESALE

    def test_bad_line_drops_whole_order(self):
        good = make_order([(1, "10", None)])
        bad = make_order([(1, "10", None), (1, "-4", None)])
        result = normalize_orders([good, bad])

        assert [t.source_id for t in result.transactions] == [good.id]
        assert result.skipped_count == 1

    def test_results_can_be_combined(self):
        income = normalize_orders([make_order([(1, "10", None)])])
        expenses = normalize_expenses([make_expense("4"), make_expense("0")])
        combined = income.extend(expenses)

        assert len(combined.transactions) == 2
        assert combined.skipped_count == 1
