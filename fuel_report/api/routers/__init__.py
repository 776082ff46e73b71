"""
fuel_report/api/routers package marker.
"""

from fuel_report.api.routers.report_router import router as report_router

__all__ = [
    "report_router",
]
