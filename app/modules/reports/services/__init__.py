"""
Services package for Reports module

Exports all report service classes for easy importing.
"""

from .balance import BalanceReportService
from .expenses import ExpenseAnalyticsService

__all__ = [
    "BalanceReportService",
    "ExpenseAnalyticsService"
]
