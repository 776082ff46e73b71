"""
fuel_report/domain package marker.
"""

from fuel_report.domain.fuel_prices import (
    UNSPECIFIED,
    AggregateReport,
    CoverageStat,
    DeliveryReceipt,
    GroupSummary,
    Record,
    ReportWorkflowResult,
)

__all__ = [
    "UNSPECIFIED",
    "AggregateReport",
    "CoverageStat",
    "DeliveryReceipt",
    "GroupSummary",
    "Record",
    "ReportWorkflowResult",
]
