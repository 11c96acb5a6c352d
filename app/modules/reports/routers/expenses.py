"""
Expense Reports Router

FastAPI router for expense analytics and the paginated expense list.
"""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.database import get_report_db
from app.modules.expenses.models import Brand, ExpenseType, RegistryType
from ..dependencies import get_permission_scope, require_expenses_access, require_statistics_access
from ..exceptions import ReportError
from ..pagination import SortSpec
from ..permissions import PermissionScope
from ..schemas import (
    AnalyticsResponse,
    ExpenseFilters,
    MonthlyAnalyticsResponse,
    MonthlyStatsResponse,
    OverviewResponse,
    PaginatedExpensesResponse,
)
from ..services.expenses import ExpenseAnalyticsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports/expenses", tags=["Reports"])


def _run(report):
    """Ejecuta un reporte traduciendo errores del motor a HTTP"""
    try:
        return report()
    except ReportError as e:
        raise HTTPException(e.status_code, e.message)
    except SQLAlchemyError as e:
        logger.error(f"Error generating expense report: {e}")
        raise HTTPException(500, f"Error generating report: {str(e)}")


@router.get("", response_model=PaginatedExpensesResponse)
def get_paginated_expenses(
    page_index: int = Query(0, description="Zero-based page; clamped to the last page"),
    page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    start_date: Optional[date] = Query(None, description="Invoice date from (inclusive)"),
    end_date: Optional[date] = Query(None, description="Invoice date to (inclusive)"),
    category_id: Optional[UUID] = Query(None),
    payment_method_id: Optional[UUID] = Query(None),
    supplier_id: Optional[UUID] = Query(None),
    expense_type: Optional[ExpenseType] = Query(None),
    registry_type: Optional[RegistryType] = Query(None),
    brand: Optional[Brand] = Query(None, description="barfer or slr"),
    search_term: Optional[str] = Query(None, max_length=200),
    sort_field: str = Query("occurred_at", description="Unknown fields fall back to occurred_at"),
    sort_direction: str = Query("desc", description="asc or desc"),
    _=Depends(require_expenses_access),
    scope: PermissionScope = Depends(get_permission_scope),
    db: Session = Depends(get_report_db)
):
    """List expenses visible to the caller, filtered, sorted and paginated."""
    filters = ExpenseFilters(
        start_date=start_date,
        end_date=end_date,
        category_id=category_id,
        payment_method_id=payment_method_id,
        supplier_id=supplier_id,
        expense_type=expense_type,
        registry_type=registry_type,
        brand=brand,
        search_term=search_term,
    )
    service = ExpenseAnalyticsService(db=db, scope=scope)
    return _run(lambda: service.get_paginated_expenses(
        page_index=page_index,
        page_size=page_size,
        filters=filters,
        sort=SortSpec(field=sort_field, direction=sort_direction),
    ))


@router.get("/analytics/categories", response_model=AnalyticsResponse)
def get_category_analytics(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    _=Depends(require_statistics_access),
    scope: PermissionScope = Depends(get_permission_scope),
    db: Session = Depends(get_report_db)
):
    """Expenses by category, ranked by amount."""
    service = ExpenseAnalyticsService(db=db, scope=scope)
    return _run(lambda: service.get_category_analytics(start_date, end_date))


@router.get("/analytics/types", response_model=AnalyticsResponse)
def get_type_analytics(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    _=Depends(require_statistics_access),
    scope: PermissionScope = Depends(get_permission_scope),
    db: Session = Depends(get_report_db)
):
    """Expenses by ordinary / extraordinary."""
    service = ExpenseAnalyticsService(db=db, scope=scope)
    return _run(lambda: service.get_type_analytics(start_date, end_date))


@router.get("/analytics/payment-methods", response_model=AnalyticsResponse)
def get_payment_method_analytics(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    _=Depends(require_statistics_access),
    scope: PermissionScope = Depends(get_permission_scope),
    db: Session = Depends(get_report_db)
):
    """Expenses by payment method."""
    service = ExpenseAnalyticsService(db=db, scope=scope)
    return _run(lambda: service.get_payment_method_analytics(start_date, end_date))


@router.get("/analytics/monthly", response_model=MonthlyAnalyticsResponse)
def get_monthly_analytics(
    category_id: Optional[UUID] = Query(None, description="Restrict to one category"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    _=Depends(require_statistics_access),
    scope: PermissionScope = Depends(get_permission_scope),
    db: Session = Depends(get_report_db)
):
    """Expenses per month, chronological."""
    service = ExpenseAnalyticsService(db=db, scope=scope)
    return _run(lambda: service.get_monthly_analytics(category_id, start_date, end_date))


@router.get("/analytics/overview", response_model=OverviewResponse)
def get_overview(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    _=Depends(require_statistics_access),
    scope: PermissionScope = Depends(get_permission_scope),
    db: Session = Depends(get_report_db)
):
    """Total and average spend with the ordinary/extraordinary split."""
    service = ExpenseAnalyticsService(db=db, scope=scope)
    return _run(lambda: service.get_overview(start_date, end_date))


@router.get("/analytics/monthly-stats", response_model=MonthlyStatsResponse)
def get_monthly_stats(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    _=Depends(require_statistics_access),
    scope: PermissionScope = Depends(get_permission_scope),
    db: Session = Depends(get_report_db)
):
    """Counts and amounts of one month by type and registry."""
    service = ExpenseAnalyticsService(db=db, scope=scope)
    return _run(lambda: service.get_monthly_stats(year, month))
