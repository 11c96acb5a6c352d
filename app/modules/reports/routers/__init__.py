"""
Routers package for Reports module

Exports all report router instances for easy importing.
"""

from .balance import router as balance_router
from .expenses import router as expenses_router

__all__ = [
    "balance_router",
    "expenses_router"
]
