"""
tests/test_date_filter.py

Record extraction plus the range and "today" filters.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from conftest import envelope, record
from fuel_report.services.date_filter import (
    extract_records,
    filter_by_range,
    filter_today,
    parse_record_date,
)


# ---------------------------------------------------------------------------
# Envelope handling
# ---------------------------------------------------------------------------


class TestExtractRecords:
    @pytest.mark.parametrize(
        "payload",
        [
            None,
            "not json",
            42,
            {},
            {"result": None},
            {"result": []},
            {"result": {"records": None}},
            {"result": {"records": {"a": 1}}},
            {"records": [record()]},
        ],
    )
    def test_malformed_envelope_yields_empty_list(self, payload, caplog) -> None:
        assert extract_records(payload) == []
        assert "Data structure not as expected" in caplog.text

    @pytest.mark.parametrize(
        "payload",
        [None, {}, {"result": {"records": "x"}}],
    )
    def test_filters_never_raise_on_malformed_envelope(self, payload) -> None:
        assert filter_by_range(payload, date(2024, 1, 1), date(2024, 12, 31)) == []
        assert filter_today(payload, today=date(2024, 3, 10)) == []

    def test_reads_result_records_envelope(self) -> None:
        rows = [record(), record(producto="Diesel")]
        assert extract_records(envelope(rows)) == rows

    def test_accepts_bare_list_and_skips_non_objects(self) -> None:
        rows = [record(), "junk", None, record(producto="Diesel")]
        assert [r["producto"] for r in extract_records(rows)] == ["Nafta", "Diesel"]


# ---------------------------------------------------------------------------
# Date parsing
# ---------------------------------------------------------------------------


class TestParseRecordDate:
    def test_first_parseable_candidate_wins(self) -> None:
        row = {"fecha_vigencia": "garbage", "fecha": "2024-03-09T10:00:00", "date": "2024-01-01"}
        assert parse_record_date(row) == datetime(2024, 3, 9, 10, 0)

    def test_custom_candidate_order(self) -> None:
        row = {"fecha": "2024-03-09", "date": "2024-01-01"}
        assert parse_record_date(row, ("date", "fecha")) == datetime(2024, 1, 1)

    def test_missing_date_returns_none(self) -> None:
        assert parse_record_date({"producto": "Nafta"}) is None

    def test_aware_timestamp_is_converted_to_report_offset(self) -> None:
        row = {"fecha": "2024-03-10T02:00:00Z"}
        assert parse_record_date(row) == datetime(2024, 3, 9, 23, 0)

    def test_space_separated_timestamp(self) -> None:
        assert parse_record_date({"fecha": "2024-03-10 07:30:00"}) == datetime(2024, 3, 10, 7, 30)


# ---------------------------------------------------------------------------
# Range filter
# ---------------------------------------------------------------------------


class TestFilterByRange:
    def test_inclusive_on_both_ends(self) -> None:
        rows = [
            record(fecha_vigencia="2024-03-01T12:00:00"),
            record(fecha_vigencia="2024-03-05T12:00:00"),
            record(fecha_vigencia="2024-03-10T12:00:00"),
            record(fecha_vigencia="2024-03-11T12:00:00"),
        ]
        kept = filter_by_range(envelope(rows), date(2024, 3, 1), date(2024, 3, 10))
        assert [r["fecha_vigencia"][:10] for r in kept] == ["2024-03-01", "2024-03-05", "2024-03-10"]

    def test_timestamps_are_shifted_back_three_hours(self) -> None:
        early_morning = record(fecha_vigencia="2024-03-11T02:00:00")
        later = record(fecha_vigencia="2024-03-11T04:00:00")
        kept = filter_by_range(envelope([early_morning, later]), date(2024, 3, 1), date(2024, 3, 10))
        assert kept == [early_morning]

    def test_date_only_value_shifts_into_previous_day(self) -> None:
        date_only = record(fecha_vigencia="2024-03-01")
        assert filter_by_range(envelope([date_only]), date(2024, 3, 1), date(2024, 3, 10)) == []
        assert filter_by_range(envelope([date_only]), date(2024, 2, 29), date(2024, 2, 29)) == [date_only]

    def test_records_without_date_are_excluded(self) -> None:
        rows = [record(fecha_vigencia=None), record(fecha_vigencia="not a date")]
        assert filter_by_range(envelope(rows), date(2000, 1, 1), date(2100, 1, 1)) == []


# ---------------------------------------------------------------------------
# Today filter
# ---------------------------------------------------------------------------


class TestFilterToday:
    def test_matches_calendar_date_without_shift(self) -> None:
        just_after_midnight = record(fecha_vigencia="2024-03-10T01:00:00")
        yesterday = record(fecha_vigencia="2024-03-09T23:59:00")
        kept = filter_today(envelope([just_after_midnight, yesterday]), today=date(2024, 3, 10))
        assert kept == [just_after_midnight]

    def test_defaults_to_current_date_at_utc_minus_three(self, monkeypatch) -> None:
        import fuel_report.services.date_filter as date_filter

        monkeypatch.setattr(date_filter, "report_today", lambda utc_offset_hours=-3: date(2024, 3, 10))
        kept = filter_today(envelope([record(), record(fecha_vigencia="2024-03-09T10:00:00")]))
        assert len(kept) == 1
