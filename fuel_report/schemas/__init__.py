"""
fuel_report/schemas package marker.
"""

from fuel_report.schemas.report import (
    ErrorResponse,
    HealthResponse,
    ReportPeriodResponse,
    ReportResultResponse,
    TriggerReportRequest,
    TriggerReportResponse,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "ReportPeriodResponse",
    "ReportResultResponse",
    "TriggerReportRequest",
    "TriggerReportResponse",
]
