"""
fuel_report/services/date_filter.py

Record extraction and date-window filtering.

Two filtering modes are supported and they compare dates differently:

* ``filter_by_range`` shifts each record timestamp by the report offset
  (``-3`` hours by default) before comparing its calendar date with the
  inclusive ``[start, end]`` window.
* ``filter_today`` compares the unshifted calendar date of each record with
  the current date evaluated at the report offset.

Record timestamps are looked up through an ordered list of candidate field
names; the first candidate holding a parseable value wins.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Sequence

from fuel_report.config import DEFAULT_DATE_FIELDS
from fuel_report.domain.fuel_prices import Record

logger = logging.getLogger(__name__)

DEFAULT_UTC_OFFSET_HOURS = -3


def report_timezone(utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS) -> timezone:
    """Fixed-offset timezone used for "today" and timestamp normalisation."""
    return timezone(timedelta(hours=utc_offset_hours))


def report_today(utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS) -> date:
    """Current calendar date at the report offset."""
    return datetime.now(tz=report_timezone(utc_offset_hours)).date()


def extract_records(payload: Any) -> list[Record]:
    """
    Return the record list from an upstream payload.

    Accepts the ``{"result": {"records": [...]}}`` envelope or a bare list.
    Any other shape yields an empty list and a warning.
    """

    if isinstance(payload, list):
        candidates = payload
    elif isinstance(payload, dict):
        result = payload.get("result")
        candidates = result.get("records") if isinstance(result, dict) else None
    else:
        candidates = None

    if not isinstance(candidates, list):
        logger.warning("Data structure not as expected, returning empty record list")
        return []

    records = [item for item in candidates if isinstance(item, dict)]
    skipped = len(candidates) - len(records)
    if skipped:
        logger.warning("Skipped %d non-object items in upstream records", skipped)
    return records


def _parse_value(value: Any, tz: timezone) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, datetime.min.time())
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        normalized = text[:-1] + "+00:00" if text.endswith("Z") else text
        try:
            parsed = datetime.fromisoformat(normalized)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(tz).replace(tzinfo=None)
    return parsed


def parse_record_date(
    record: Record,
    candidates: Sequence[str] = DEFAULT_DATE_FIELDS,
    *,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
) -> datetime | None:
    """
    Return the record timestamp as naive wall time at the report offset.

    Timezone-aware values are converted to the report offset first.
    ``None`` when no candidate field holds a parseable value.
    """

    tz = report_timezone(utc_offset_hours)
    for field_name in candidates:
        parsed = _parse_value(record.get(field_name), tz)
        if parsed is not None:
            return parsed
    return None


def filter_by_range(
    payload: Any,
    start: date,
    end: date,
    *,
    candidates: Sequence[str] = DEFAULT_DATE_FIELDS,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
) -> list[Record]:
    """
    Keep records whose shifted calendar date falls within ``[start, end]``.

    Date-only values are read as midnight, so the shift places them on the
    previous calendar day.
    """

    shift = timedelta(hours=utc_offset_hours)
    matched: list[Record] = []
    for record in extract_records(payload):
        parsed = parse_record_date(record, candidates, utc_offset_hours=utc_offset_hours)
        if parsed is None:
            continue
        if start <= (parsed + shift).date() <= end:
            matched.append(record)

    logger.debug("Range filter [%s, %s] kept %d records", start, end, len(matched))
    return matched


def filter_today(
    payload: Any,
    *,
    today: date | None = None,
    candidates: Sequence[str] = DEFAULT_DATE_FIELDS,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
) -> list[Record]:
    """
    Keep records dated today at the report offset; record dates are not shifted.
    """

    target = today or report_today(utc_offset_hours)
    matched: list[Record] = []
    for record in extract_records(payload):
        parsed = parse_record_date(record, candidates, utc_offset_hours=utc_offset_hours)
        if parsed is not None and parsed.date() == target:
            matched.append(record)

    logger.debug("Today filter %s kept %d records", target, len(matched))
    return matched
