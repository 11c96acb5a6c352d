"""
Balance Reports Router

FastAPI router for the monthly balance endpoint.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.database.database import get_report_db
from ..dependencies import get_permission_scope, require_balance_access
from ..exceptions import ReportError
from ..permissions import PermissionScope
from ..schemas import BalanceMonthlyResponse
from ..services.balance import BalanceReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports/balance", tags=["Reports"])


@router.get("/monthly", response_model=BalanceMonthlyResponse)
def get_balance_monthly(
    start_date: Optional[date] = Query(None, description="Start date (inclusive); omitted = full history"),
    end_date: Optional[date] = Query(None, description="End date (inclusive); omitted = full history"),
    _=Depends(require_balance_access),
    scope: PermissionScope = Depends(get_permission_scope),
    db: Session = Depends(get_report_db)
):
    """Generate the monthly balance: income per channel vs ordinary/extraordinary expenses."""
    try:
        service = BalanceReportService(db=db, scope=scope)
        return service.get_balance_monthly(start_date=start_date, end_date=end_date)
    except ReportError as e:
        raise HTTPException(e.status_code, e.message)
    except SQLAlchemyError as e:
        logger.error(f"Error generating balance report: {e}")
        raise HTTPException(500, f"Error generating report: {str(e)}")
