"""
tests/test_report_renderer.py

Pytest unit tests for the HTML and plain-text report renderers.

Coverage
--------
- "no data" placeholder without any table markup
- one section per aggregation dimension, ordered by count
- self-contained output and HTML escaping
- report date and generation timestamp in the header
- plain-text alternative body and subject line
"""

from __future__ import annotations

from datetime import date, datetime

from conftest import record
from fuel_report.services.aggregation_service import aggregate
from fuel_report.services.report_renderer import (
    NO_DATA_TITLE,
    build_subject,
    render_report_html,
    render_report_text,
)

GENERATED_AT = datetime(2024, 3, 10, 9, 30, 15)


# ---------------------------------------------------------------------------
# HTML body
# ---------------------------------------------------------------------------


class TestRenderHtml:
    def test_empty_report_renders_placeholder_without_tables(self) -> None:
        html_doc = render_report_html(aggregate([], []), GENERATED_AT)

        assert html_doc.startswith("<!DOCTYPE html>")
        assert NO_DATA_TITLE in html_doc
        assert "10/03/2024" in html_doc
        assert "<table" not in html_doc

    def test_report_with_data_renders_every_dimension(self) -> None:
        today = [record(producto="Nafta"), record(producto="Diesel"), record(producto="Nafta")]
        html_doc = render_report_html(aggregate(today, today), GENERATED_AT)

        assert NO_DATA_TITLE not in html_doc
        for heading in (
            "Records by product",
            "Records by province",
            "Records by station",
            "Records by brand",
            "Top localities",
            "Station coverage",
        ):
            assert heading in html_doc
        assert html_doc.index("Nafta") < html_doc.index("Diesel")
        assert "66.7%" in html_doc
        assert "33.3%" in html_doc
        assert "Generated 10/03/2024 09:30:15" in html_doc

    def test_output_is_self_contained(self) -> None:
        html_doc = render_report_html(aggregate([record()], [record()]), GENERATED_AT)
        assert "<link" not in html_doc
        assert "<script" not in html_doc
        assert "<style" not in html_doc

    def test_values_are_html_escaped(self) -> None:
        today = [record(empresa="<b>Shell & Co</b>")]
        html_doc = render_report_html(aggregate(today, today), GENERATED_AT)
        assert "&lt;b&gt;Shell &amp; Co&lt;/b&gt;" in html_doc
        assert "<b>Shell" not in html_doc

    def test_explicit_report_date_overrides_generation_date(self) -> None:
        html_doc = render_report_html(aggregate([], []), GENERATED_AT, report_date=date(2024, 3, 9))
        assert "Data for 09/03/2024" in html_doc


# ---------------------------------------------------------------------------
# Plain-text body and subject
# ---------------------------------------------------------------------------


class TestRenderText:
    def test_lists_group_counts_with_percentages(self) -> None:
        today = [record(producto="Nafta"), record(producto="Diesel")]
        text = render_report_text(aggregate(today, today), GENERATED_AT)
        assert "FUEL PRICE REPORT - 10/03/2024" in text
        assert "Nafta: 1 (50.0%)" in text

    def test_empty_report_uses_placeholder(self) -> None:
        assert NO_DATA_TITLE in render_report_text(aggregate([], []), GENERATED_AT)

    def test_subject_uses_day_month_year(self) -> None:
        assert build_subject(date(2024, 3, 10)) == "Fuel Price Report - 10/03/2024"
