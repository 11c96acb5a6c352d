"""
Errores del motor de reportes
"""

from datetime import date
from typing import Any, Optional


class ReportError(Exception):
    """Base para errores del motor de reportes"""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidAmount(ReportError):
    """Registro con monto no válido; se descarta ese registro, no el reporte"""
    status_code = 422

    def __init__(self, record_id: Any, amount: Any):
        super().__init__(f"Invalid amount {amount!r} on record {record_id}")
        self.record_id = record_id
        self.amount = amount


class InvalidDateRange(ReportError):
    status_code = 422

    def __init__(self, start_date: date, end_date: date):
        super().__init__("end_date must be greater than or equal to start_date")
        self.start_date = start_date
        self.end_date = end_date


def validate_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date is not None and end_date is not None and end_date < start_date:
        raise InvalidDateRange(start_date, end_date)
