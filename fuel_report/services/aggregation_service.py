"""
fuel_report/services/aggregation_service.py

Group-by and coverage statistics over fetched fuel price records.

Formulas
--------
Group percentage   = group count / total records * 100
Station coverage   = stations active today / stations ever seen * 100
Price coverage     = stations active today with a positive price
                     / stations active today * 100

Every percentage is rounded to two decimals and is ``0.0`` when its
denominator is zero. Aggregation never raises for an empty record list.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from fuel_report.domain.fuel_prices import (
    FIELD_BRAND,
    FIELD_COMPANY,
    FIELD_COMPANY_ID,
    FIELD_LOCALITY,
    FIELD_PRICE,
    FIELD_PRODUCT,
    FIELD_PROVINCE,
    UNSPECIFIED,
    AggregateReport,
    CoverageStat,
    GroupSummary,
    Record,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCALITY_LIMIT = 10


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def percentage(numerator: int | float, denominator: int | float) -> float:
    """
    ``numerator / denominator * 100`` rounded to 2 decimals; ``0.0`` on a zero denominator.
    """
    if not denominator:
        return 0.0
    return round((numerator / denominator) * 100, 2)


def _clean(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def station_id(record: Record) -> str | None:
    """Station identifier: ``idempresa`` when present, otherwise the station name."""
    return _clean(record.get(FIELD_COMPANY_ID)) or _clean(record.get(FIELD_COMPANY))


def _has_positive_price(record: Record) -> bool:
    raw = record.get(FIELD_PRICE)
    if raw is None or isinstance(raw, bool):
        return False
    try:
        return float(str(raw).strip().replace(",", ".")) > 0
    except ValueError:
        return False


def _station_ids(records: Iterable[Record]) -> set[str]:
    return {sid for sid in (station_id(record) for record in records) if sid}


def group_records(records: Iterable[Record], field: str) -> dict[str, list[Record]]:
    """
    Map each value of *field* to its records, in first-seen order.

    Missing or blank values land in the ``"unspecified"`` bucket.
    """
    grouped: dict[str, list[Record]] = {}
    for record in records:
        key = _clean(record.get(field)) or UNSPECIFIED
        grouped.setdefault(key, []).append(record)
    return grouped


def summarize_groups(
    records: Sequence[Record],
    field: str,
    *,
    limit: int | None = None,
) -> list[GroupSummary]:
    """
    Build :class:`GroupSummary` rows sorted by count, descending.

    Equal counts keep first-seen order.
    """
    total = len(records)
    summaries = [
        GroupSummary(
            name=name,
            count=len(members),
            distinct_entity_count=len(_station_ids(members)),
            percentage=percentage(len(members), total),
            records=tuple(members),
        )
        for name, members in group_records(records, field).items()
    ]
    summaries.sort(key=lambda summary: summary.count, reverse=True)
    if limit is not None:
        return summaries[:limit]
    return summaries


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def aggregate(
    today_records: Sequence[Record],
    all_records: Sequence[Record],
    *,
    locality_limit: int = DEFAULT_LOCALITY_LIMIT,
) -> AggregateReport:
    """
    Aggregate today's records, using the full dataset as the coverage baseline.

    Parameters
    ----------
    today_records:
        Records reported today (output of ``filter_today``).
    all_records:
        Every record in the fetched dataset.
    locality_limit:
        Number of localities kept in ``by_locality``.
    """
    today_records = list(today_records)

    all_stations = _station_ids(all_records)
    active_stations = _station_ids(today_records)
    priced_stations = _station_ids(r for r in today_records if _has_positive_price(r))
    brands = {b for b in (_clean(r.get(FIELD_BRAND)) for r in today_records) if b}

    report = AggregateReport(
        total_records=len(today_records),
        by_product=summarize_groups(today_records, FIELD_PRODUCT),
        by_province=summarize_groups(today_records, FIELD_PROVINCE),
        by_company=summarize_groups(today_records, FIELD_COMPANY),
        by_brand=summarize_groups(today_records, FIELD_BRAND),
        by_locality=summarize_groups(today_records, FIELD_LOCALITY, limit=locality_limit),
        station_coverage=CoverageStat(
            numerator=len(active_stations),
            denominator=len(all_stations),
            percentage=percentage(len(active_stations), len(all_stations)),
        ),
        price_coverage=CoverageStat(
            numerator=len(priced_stations),
            denominator=len(active_stations),
            percentage=percentage(len(priced_stations), len(active_stations)),
        ),
        distinct_brands=len(brands),
    )

    logger.info(
        "Aggregated records total=%d stations_active=%d stations_total=%d brands=%d",
        report.total_records,
        report.active_stations,
        report.total_stations,
        report.distinct_brands,
    )
    return report
