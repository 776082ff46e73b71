"""
fuel_report/services package marker.
"""

from fuel_report.services.aggregation_service import aggregate, group_records, percentage
from fuel_report.services.date_filter import (
    extract_records,
    filter_by_range,
    filter_today,
    parse_record_date,
)
from fuel_report.services.report_renderer import render_report_html, render_report_text
from fuel_report.services.report_workflow_service import (
    ReportWorkflowService,
    get_report_workflow_service,
)

__all__ = [
    "aggregate",
    "extract_records",
    "filter_by_range",
    "filter_today",
    "get_report_workflow_service",
    "group_records",
    "parse_record_date",
    "percentage",
    "render_report_html",
    "render_report_text",
    "ReportWorkflowService",
]
