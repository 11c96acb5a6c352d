"""
Expense Analytics Service

Handles all expense (salidas) reports: breakdowns by category, type,
month and payment method, the overview summary, per-month stats and the
paginated expense list. Every report is computed against the caller's
permission scope.
"""

import calendar
import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import selectinload

from .base import BaseReportService
from ..aggregation import (
    AggregateBucket, Dimension, aggregate_by, fill_months, iter_months, month_start, sum_amounts
)
from ..overview import monthly_stats, summarize
from ..pagination import SortSpec, expense_sort, paginate
from ..schemas import (
    AggregateBucketOut,
    AnalyticsResponse,
    ExpenseFilters,
    ExpenseListItem,
    MonthlyAnalyticsResponse,
    MonthlyStatsResponse,
    OrdinaryVsExtraordinary,
    OverviewResponse,
    PaginatedExpensesResponse,
    ShareOut,
)
from ..transactions import NormalizationResult
from app.modules.expenses.models import Expense

logger = logging.getLogger(__name__)


class ExpenseAnalyticsService(BaseReportService):
    """Service for generating expense analytics"""

    def _analytics_response(
        self,
        result: NormalizationResult,
        buckets: List[AggregateBucket],
        dimension: Dimension,
        start_date: Optional[date],
        end_date: Optional[date],
        response_class=AnalyticsResponse,
        **extra
    ):
        return response_class(
            period_start=start_date,
            period_end=end_date,
            dimension=dimension.value,
            buckets=[AggregateBucketOut.model_validate(bucket) for bucket in buckets],
            total_amount=sum_amounts(result.transactions),
            total_count=len(result.transactions),
            excluded_records=result.skipped_count,
            **extra
        )

    def get_category_analytics(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> AnalyticsResponse:
        """
        Expenses grouped by category, ranked by amount.

        Categories outside the caller's scope never appear: they are filtered
        in SQL before aggregating, so they are not even in the totals.
        """
        self._validate_date_range(start_date, end_date)

        result = self._get_expense_transactions(ExpenseFilters(start_date=start_date, end_date=end_date))
        labels = self._get_category_labels()
        buckets = aggregate_by(result.transactions, Dimension.CATEGORY, labels=labels)

        logger.info(f"Category analytics {start_date}..{end_date}: {len(buckets)} buckets")
        return self._analytics_response(result, buckets, Dimension.CATEGORY, start_date, end_date)

    def get_type_analytics(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> AnalyticsResponse:
        """Expenses grouped by ordinary / extraordinary."""
        self._validate_date_range(start_date, end_date)

        result = self._get_expense_transactions(ExpenseFilters(start_date=start_date, end_date=end_date))
        buckets = aggregate_by(result.transactions, Dimension.EXPENSE_TYPE)
        return self._analytics_response(result, buckets, Dimension.EXPENSE_TYPE, start_date, end_date)

    def get_payment_method_analytics(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> AnalyticsResponse:
        """Expenses grouped by payment method."""
        self._validate_date_range(start_date, end_date)

        result = self._get_expense_transactions(ExpenseFilters(start_date=start_date, end_date=end_date))
        labels = self.crud.payment_method_labels()
        buckets = aggregate_by(result.transactions, Dimension.PAYMENT_METHOD, labels=labels)
        return self._analytics_response(result, buckets, Dimension.PAYMENT_METHOD, start_date, end_date)

    def get_monthly_analytics(
        self,
        category_id: Optional[UUID] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> MonthlyAnalyticsResponse:
        """
        Expenses per calendar month, in chronological order.

        With a full date range every month of the range is present (zero when
        empty); otherwise the axis spans the first to the last month with data.
        """
        self._validate_date_range(start_date, end_date)

        filters = ExpenseFilters(start_date=start_date, end_date=end_date, category_id=category_id)
        result = self._get_expense_transactions(filters)
        buckets = aggregate_by(result.transactions, Dimension.MONTH, order="key")

        if start_date is not None and end_date is not None:
            buckets = fill_months(buckets, iter_months(start_date, end_date))
        elif buckets:
            buckets = fill_months(buckets, iter_months(month_start(buckets[0].key), month_start(buckets[-1].key)))

        return self._analytics_response(
            result, buckets, Dimension.MONTH, start_date, end_date,
            response_class=MonthlyAnalyticsResponse,
            category_id=category_id
        )

    def get_overview(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> OverviewResponse:
        """Total spend, average spend and ordinary/extraordinary split."""
        self._validate_date_range(start_date, end_date)

        result = self._get_expense_transactions(ExpenseFilters(start_date=start_date, end_date=end_date))
        summary = summarize(result.transactions)

        return OverviewResponse(
            period_start=start_date,
            period_end=end_date,
            total_spend=summary.total_spend,
            total_count=summary.total_count,
            average_spend=summary.average_spend,
            ordinary_vs_extraordinary=OrdinaryVsExtraordinary(
                ordinary=ShareOut.model_validate(summary.ordinary),
                extraordinary=ShareOut.model_validate(summary.extraordinary),
            ),
            excluded_records=result.skipped_count,
        )

    def get_monthly_stats(self, year: int, month: int) -> MonthlyStatsResponse:
        """Conteos y montos de un mes por tipo de salida y tipo de registro."""
        last_day = calendar.monthrange(year, month)[1]
        start_date, end_date = date(year, month, 1), date(year, month, last_day)

        result = self._get_expense_transactions(ExpenseFilters(start_date=start_date, end_date=end_date))
        stats = monthly_stats(result.transactions)

        return MonthlyStatsResponse(
            year=year,
            month=month,
            excluded_records=result.skipped_count,
            **asdict(stats)
        )

    def get_paginated_expenses(
        self,
        page_index: int = 0,
        page_size: Optional[int] = None,
        filters: Optional[ExpenseFilters] = None,
        sort: Optional[SortSpec] = None
    ) -> PaginatedExpensesResponse:
        """
        One page of the raw expense list.

        Scope and filters go into the same statement that counts and slices,
        so `total` always matches what the pages contain.
        """
        filters = filters or ExpenseFilters()
        self._validate_date_range(filters.start_date, filters.end_date)

        query = self.crud.expenses_query(filters, self.scope).options(
            selectinload(Expense.category),
            selectinload(Expense.payment_method),
            selectinload(Expense.supplier),
        )
        query, order_by = expense_sort(query, sort)
        page = paginate(query, order_by, page_index, page_size)

        return PaginatedExpensesResponse(
            items=[ExpenseListItem.model_validate(expense) for expense in page.items],
            total=page.total,
            page_count=page.page_count,
            page_index=page.page_index,
            page_size=page.page_size,
        )
