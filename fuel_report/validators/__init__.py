"""
fuel_report/validators package marker.
"""

from fuel_report.validators.report_period import ReportPeriod, resolve_report_period

__all__ = [
    "ReportPeriod",
    "resolve_report_period",
]
