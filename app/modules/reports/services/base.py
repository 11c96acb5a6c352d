"""
Base service class for Reports module

Provides common functionality for all report services: the read-only crud,
the caller's permission scope, date range validation and the one-shot fetch
+ normalization of the working set.
"""

import logging
from datetime import date
from typing import Dict, Optional

from sqlalchemy.orm import Session

from ..crud import ReportCrud
from ..exceptions import validate_date_range
from ..permissions import PermissionScope
from ..schemas import ExpenseFilters
from ..transactions import NormalizationResult, normalize_expenses, normalize_orders

logger = logging.getLogger(__name__)


class BaseReportService:
    """Base service class for all report services"""

    def __init__(self, db: Session, scope: PermissionScope):
        self.db = db
        self.scope = scope
        self.crud = ReportCrud(db)

    def _validate_date_range(self, start_date: Optional[date], end_date: Optional[date]) -> None:
        """Raises InvalidDateRange before anything is fetched"""
        validate_date_range(start_date, end_date)

    def _get_expense_transactions(self, filters: ExpenseFilters) -> NormalizationResult:
        """Fetch scoped expenses once and normalize them"""
        if self.scope.is_empty:
            logger.debug("Empty category scope, skipping expense fetch")
            return NormalizationResult()
        return normalize_expenses(self.crud.fetch_expenses(filters, self.scope))

    def _get_income_transactions(self, start_date: Optional[date], end_date: Optional[date]) -> NormalizationResult:
        """Fetch income orders once and normalize them"""
        return normalize_orders(self.crud.fetch_orders(start_date, end_date))

    def _get_category_labels(self) -> Dict[str, str]:
        return self.crud.category_labels(self.scope)
