"""
fuel_report/validators/report_period.py

Resolution and validation of requested report periods.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

from fuel_report.errors import ReportValidationError

DATE_FORMAT = "%Y-%m-%d"
INVALID_FORMAT_MESSAGE = "Invalid date format. Use YYYY-MM-DD format."
INVERTED_RANGE_MESSAGE = "Start date cannot be after end date."


@dataclass(frozen=True)
class ReportPeriod:
    start_date: date
    end_date: date


def _parse_date(raw: str) -> date:
    try:
        return datetime.strptime(raw.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise ReportValidationError(INVALID_FORMAT_MESSAGE) from exc


def resolve_report_period(
    start_raw: str | None,
    end_raw: str | None,
    *,
    today: date,
    window_days: int = 7,
) -> ReportPeriod:
    """
    Resolve optional raw dates into a validated period.

    A missing start defaults to ``today - window_days`` and a missing end to
    ``today``.
    """

    start = _parse_date(start_raw) if start_raw and start_raw.strip() else today - timedelta(days=window_days)
    end = _parse_date(end_raw) if end_raw and end_raw.strip() else today

    if start > end:
        raise ReportValidationError(INVERTED_RANGE_MESSAGE)
    return ReportPeriod(start_date=start, end_date=end)
