"""
Transaction Normalizer

Converts raw store records (expense rows, order line items) into the single
canonical `Transaction` shape every aggregator consumes, so aggregation never
branches on where a record came from.
"""

import enum
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Any, Iterable, List, Optional

from app.core.config import settings
from app.modules.expenses.models import DEFAULT_BRAND, Brand, ExpenseType, RegistryType
from app.modules.orders.models import SalesChannel
from .exceptions import InvalidAmount

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

_KG_PATTERN = re.compile(r"(\d+(?:[.,]\d+)?)\s*KG", re.IGNORECASE)


class TransactionKind(enum.Enum):
    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Transaction:
    id: str
    source_id: Any
    occurred_at: datetime
    amount: Decimal
    kind: TransactionKind
    channel: Optional[SalesChannel] = None
    expense_type: Optional[ExpenseType] = None
    category_id: Any = None
    payment_method_id: Any = None
    registry_type: Optional[RegistryType] = None
    brand: Optional[Brand] = None
    weight_kg: Decimal = Decimal("0")
    count: int = 1

    def __post_init__(self):
        if self.amount < 0:
            raise InvalidAmount(self.source_id, self.amount)
        if self.kind is TransactionKind.INCOME and self.channel is None:
            raise ValueError("income transactions require a channel")
        if self.kind is TransactionKind.EXPENSE and self.expense_type is None:
            raise ValueError("expense transactions require an expense_type")

    @property
    def is_income(self) -> bool:
        return self.kind is TransactionKind.INCOME

    @property
    def is_expense(self) -> bool:
        return self.kind is TransactionKind.EXPENSE


@dataclass
class NormalizationResult:
    """Transacciones válidas y los registros descartados del lote"""
    transactions: List[Transaction] = field(default_factory=list)
    skipped: List[InvalidAmount] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def extend(self, other: "NormalizationResult") -> "NormalizationResult":
        return NormalizationResult(
            transactions=self.transactions + other.transactions,
            skipped=self.skipped + other.skipped,
        )


def to_amount(value: Any, record_id: Any = None) -> Decimal:
    """Monto a centavos exactos. Valores no numéricos son InvalidAmount."""
    if value is None:
        raise InvalidAmount(record_id, value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise InvalidAmount(record_id, value)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    raise ValueError(f"not a date: {value!r}")


def order_occurred_at(order: Any) -> datetime:
    """
    Fecha contable de una orden: la de entrega si existe, si no la de creación.

    The store-side filter uses the same rule (see ReportCrud.order_date_column),
    otherwise monthly totals would disagree between reports.
    """
    if getattr(order, "delivery_date", None) is not None:
        return _as_datetime(order.delivery_date)
    return _as_datetime(order.created_at)


def item_weight_kg(product_name: Optional[str]) -> Decimal:
    """
    Peso por unidad de un producto, leído de su nombre ("Pollo 10 KG").

    Big Dog pesa 15 kg y los complementos no suman peso; si el nombre no
    indica kilos se usa la estimación ESTIMATED_ITEM_WEIGHT_KG.
    """
    name = (product_name or "").lower()
    if "big dog" in name:
        return Decimal("15")
    if "complemento" in name:
        return Decimal("0")
    match = _KG_PATTERN.search(name)
    if match:
        return Decimal(match.group(1).replace(",", "."))
    return Decimal(str(settings.ESTIMATED_ITEM_WEIGHT_KG))


def _enum_value(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return enum_cls.__members__.get(str(value).upper())


def normalize_expense(raw: Any) -> Transaction:
    """Una salida -> una transacción EXPENSE. El monto debe ser > 0."""
    amount = to_amount(getattr(raw, "amount", None), raw.id)
    if amount <= 0:
        raise InvalidAmount(raw.id, amount)

    return Transaction(
        id=f"expense:{raw.id}",
        source_id=raw.id,
        occurred_at=_as_datetime(raw.invoice_date),
        amount=amount,
        kind=TransactionKind.EXPENSE,
        expense_type=_enum_value(ExpenseType, raw.expense_type) or ExpenseType.ORDINARY,
        category_id=getattr(raw, "category_id", None),
        payment_method_id=getattr(raw, "payment_method_id", None),
        registry_type=_enum_value(RegistryType, getattr(raw, "registry_type", None)),
        brand=_enum_value(Brand, getattr(raw, "brand", None)) or DEFAULT_BRAND,
    )


def normalize_order(raw: Any) -> List[Transaction]:
    """
    Una orden -> una transacción INCOME por línea, más una por el envío.

    Every transaction shares the order's accounting date. A line without a
    channel of its own inherits the order type.
    """
    occurred_at = order_occurred_at(raw)
    order_channel = _enum_value(SalesChannel, raw.order_type) or SalesChannel.RETAIL
    transactions = []

    for index, item in enumerate(raw.items or []):
        quantity = Decimal(str(item.quantity if item.quantity is not None else 0))
        unit_price = to_amount(item.unit_price, raw.id)
        amount = to_amount(quantity * unit_price, raw.id)
        if amount < 0:
            raise InvalidAmount(raw.id, amount)
        transactions.append(Transaction(
            id=f"order:{raw.id}:{index}",
            source_id=raw.id,
            occurred_at=occurred_at,
            amount=amount,
            kind=TransactionKind.INCOME,
            channel=_enum_value(SalesChannel, getattr(item, "channel", None)) or order_channel,
            weight_kg=quantity * item_weight_kg(getattr(item, "product_name", None)),
        ))

    shipping = to_amount(getattr(raw, "shipping_price", None) or 0, raw.id)
    if shipping < 0:
        raise InvalidAmount(raw.id, shipping)
    if shipping > 0:
        transactions.append(Transaction(
            id=f"order:{raw.id}:shipping",
            source_id=raw.id,
            occurred_at=occurred_at,
            amount=shipping,
            kind=TransactionKind.INCOME,
            channel=order_channel,
        ))

    return transactions


def normalize_expenses(raws: Iterable[Any]) -> NormalizationResult:
    result = NormalizationResult()
    for raw in raws:
        try:
            result.transactions.append(normalize_expense(raw))
        except InvalidAmount as e:
            logger.warning(f"Skipping expense {e.record_id}: invalid amount {e.amount!r}")
            result.skipped.append(e)
    return result


def normalize_orders(raws: Iterable[Any]) -> NormalizationResult:
    """All-or-nothing per order: one bad line drops the whole order, never half of it."""
    result = NormalizationResult()
    for raw in raws:
        try:
            result.transactions.extend(normalize_order(raw))
        except InvalidAmount as e:
            logger.warning(f"Skipping order {e.record_id}: invalid amount {e.amount!r}")
            result.skipped.append(e)
    return result
