"""
Pydantic schemas for Reports module

Defines request and response models for all report endpoints.
All schemas include proper validation and documentation for OpenAPI.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.modules.expenses.models import Brand, ExpenseType, RegistryType


# Filters
class ExpenseFilters(BaseModel):
    """Filtros del listado y de las analíticas de salidas"""
    start_date: Optional[date] = Field(None, description="Start date (inclusive)")
    end_date: Optional[date] = Field(None, description="End date (inclusive)")
    category_id: Optional[UUID] = Field(None, description="Filter by category")
    payment_method_id: Optional[UUID] = Field(None, description="Filter by payment method")
    supplier_id: Optional[UUID] = Field(None, description="Filter by supplier")
    expense_type: Optional[ExpenseType] = Field(None, description="Ordinary or extraordinary")
    registry_type: Optional[RegistryType] = Field(None, description="Formal or informal")
    brand: Optional[Brand] = Field(None, description="Filter by brand")
    search_term: Optional[str] = Field(None, max_length=200, description="Free text search on detail")


# Aggregations
class AggregateBucketOut(BaseModel):
    """One grouped row: a category, a month, a type..."""
    key: str
    label: str
    total_amount: Decimal
    count: int
    percentage_of_total: float

    class Config:
        from_attributes = True


class AnalyticsResponse(BaseModel):
    """Response for grouped expense analytics"""
    period_start: Optional[date]
    period_end: Optional[date]
    dimension: str
    buckets: List[AggregateBucketOut]
    total_amount: Decimal = Field(description="Sum of all buckets")
    total_count: int
    excluded_records: int = Field(0, description="Records skipped because of an invalid amount")


class MonthlyAnalyticsResponse(AnalyticsResponse):
    category_id: Optional[UUID] = None


# Balance
class MonthlyBalanceRowOut(BaseModel):
    month: str = Field(description="YYYY-MM")
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

    class Config:
        from_attributes = True


class BalanceMonthlyResponse(BaseModel):
    """Response for monthly balance report"""
    period_start: Optional[date]
    period_end: Optional[date]
    rows: List[MonthlyBalanceRowOut]
    total_income: Decimal
    ordinary_expense: Decimal
    extraordinary_expense: Decimal
    net_without_extraordinary: Decimal
    net_with_extraordinary: Decimal
    excluded_records: int = 0


# Overview
class ShareOut(BaseModel):
    amount: Decimal
    count: int
    percentage: float

    class Config:
        from_attributes = True


class OrdinaryVsExtraordinary(BaseModel):
    ordinary: ShareOut
    extraordinary: ShareOut


class OverviewResponse(BaseModel):
    """Response for expenses overview"""
    period_start: Optional[date]
    period_end: Optional[date]
    total_spend: Decimal
    total_count: int
    average_spend: Decimal
    ordinary_vs_extraordinary: OrdinaryVsExtraordinary
    excluded_records: int = 0


class MonthlyStatsResponse(BaseModel):
    """Conteos y montos de un mes por tipo y registro"""
    year: int
    month: int
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
    excluded_records: int = 0


# Expense list
class NamedRef(BaseModel):
    id: UUID
    name: str

    class Config:
        from_attributes = True


class ExpenseListItem(BaseModel):
    id: UUID
    invoice_date: datetime
    detail: str
    amount: Decimal
    expense_type: ExpenseType
    registry_type: RegistryType
    category_id: Optional[UUID]
    category: Optional[NamedRef]
    payment_method: Optional[NamedRef]
    supplier: Optional[NamedRef]
    payment_date: Optional[datetime]
    receipt_number: Optional[str]
    brand: Optional[Brand]

    class Config:
        from_attributes = True


class PaginatedExpensesResponse(BaseModel):
    """Response for the paginated expense list"""
    items: List[ExpenseListItem]
    total: int
    page_count: int
    page_index: int
    page_size: int
