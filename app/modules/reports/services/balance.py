"""
Balance Reports Service

Monthly balance combining income (orders) with expenses (salidas).
"""

import logging
from datetime import date
from typing import Optional

from .base import BaseReportService
from ..balance import balance_totals, calculate_monthly_balance
from ..schemas import BalanceMonthlyResponse, ExpenseFilters, MonthlyBalanceRowOut

logger = logging.getLogger(__name__)


class BalanceReportService(BaseReportService):
    """Service for generating the monthly balance"""

    def get_balance_monthly(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> BalanceMonthlyResponse:
        """
        Generate the monthly balance report.

        Income is never category scoped; the expense side is, like every
        other aggregate. Both sides are fetched once, up front.
        """
        self._validate_date_range(start_date, end_date)

        income = self._get_income_transactions(start_date, end_date)
        expenses = self._get_expense_transactions(
            ExpenseFilters(start_date=start_date, end_date=end_date)
        )
        working_set = income.extend(expenses)

        rows = calculate_monthly_balance(working_set.transactions, start_date, end_date)
        totals = balance_totals(rows)

        logger.info(
            f"Balance report {start_date}..{end_date}: {len(rows)} months, "
            f"{working_set.skipped_count} records skipped"
        )

        return BalanceMonthlyResponse(
            period_start=start_date,
            period_end=end_date,
            rows=[MonthlyBalanceRowOut.model_validate(row) for row in rows],
            excluded_records=working_set.skipped_count,
            **totals
        )
