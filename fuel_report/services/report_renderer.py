"""
fuel_report/services/report_renderer.py

Pure rendering of an AggregateReport into email bodies.

The HTML output is self-contained: inline ``style`` attributes only, no
external stylesheets, scripts, or images. Layout blocks are ``<div>``
elements; ``<table>`` is only emitted for data, so a report without
records contains no table at all.
"""

from __future__ import annotations

import html
from datetime import date, datetime
from typing import Sequence

from fuel_report.domain.fuel_prices import AggregateReport, GroupSummary

NO_DATA_TITLE = "No data available for today"

_COLOR_HEADER = "#4c51bf"
_COLOR_ACCENT = "#667eea"
_COLOR_BG = "#f5f5f5"
_COLOR_CARD = "#f8f9fa"
_COLOR_BORDER = "#eeeeee"
_COLOR_MUTED = "#666666"
_COLOR_PERCENT = "#28a745"

_CELL = "padding:12px 15px;border-bottom:1px solid " + _COLOR_BORDER + ";"
_HEAD_CELL = (
    f"background:{_COLOR_ACCENT};color:#ffffff;padding:15px;"
    "text-align:left;font-weight:600;"
)


def build_subject(report_date: date) -> str:
    return f"Fuel Price Report - {report_date.strftime('%d/%m/%Y')}"


def _format_percent(value: float) -> str:
    return f"{value:.1f}%"


def _card(title: str, value: object, caption: str) -> str:
    return (
        f'<div style="display:inline-block;vertical-align:top;width:220px;margin:0 12px 12px 0;'
        f'background:{_COLOR_CARD};border-left:4px solid {_COLOR_ACCENT};'
        f'border-radius:8px;padding:16px 20px;">'
        f'<div style="color:{_COLOR_ACCENT};font-size:15px;font-weight:600;">{html.escape(title)}</div>'
        f'<div style="font-size:30px;font-weight:bold;color:#333333;margin:8px 0;">'
        f"{html.escape(str(value))}</div>"
        f'<div style="color:{_COLOR_MUTED};font-size:13px;">{html.escape(caption)}</div>'
        f"</div>"
    )


def _section(title: str, body: str) -> str:
    return (
        f'<div style="margin-bottom:36px;">'
        f'<h2 style="color:#333333;border-bottom:2px solid {_COLOR_ACCENT};'
        f'padding-bottom:10px;margin:0 0 18px;font-size:20px;">{html.escape(title)}</h2>'
        f"{body}</div>"
    )


def _table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    head = "".join(f'<th style="{_HEAD_CELL}">{html.escape(h)}</th>' for h in headers)
    body = "".join(
        "<tr>" + "".join(f'<td style="{_CELL}">{cell}</td>' for cell in row) + "</tr>"
        for row in rows
    )
    return (
        '<table width="100%" cellpadding="0" cellspacing="0" '
        'style="width:100%;border-collapse:collapse;background:#ffffff;">'
        f"<thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"
    )


def _group_table(
    label: str,
    groups: Sequence[GroupSummary],
    *,
    show_stations: bool = False,
) -> str:
    headers = [label, "Records", "Percentage"]
    if show_stations:
        headers.insert(2, "Stations")

    rows = []
    for group in groups:
        row = [html.escape(group.name), str(group.count)]
        if show_stations:
            row.append(str(group.distinct_entity_count))
        row.append(
            f'<strong style="color:{_COLOR_PERCENT};">{_format_percent(group.percentage)}</strong>'
        )
        rows.append(row)
    return _table(headers, rows)


def _coverage_table(report: AggregateReport) -> str:
    rows = [
        ["Registered stations", f"<strong>{report.total_stations}</strong>",
         "Stations present in the dataset"],
        ["Stations reporting today", f"<strong>{report.active_stations}</strong>",
         "Stations with at least one record today"],
        ["Stations with prices", f"<strong>{report.active_stations_with_prices}</strong>",
         "Stations that published a positive price today"],
        ["Station coverage",
         f'<strong style="color:{_COLOR_PERCENT};">{_format_percent(report.station_coverage.percentage)}</strong>',
         "Stations reporting today over registered stations"],
        ["Price coverage",
         f'<strong style="color:{_COLOR_PERCENT};">{_format_percent(report.price_coverage.percentage)}</strong>',
         "Stations with prices over stations reporting today"],
    ]
    return _table(["Metric", "Value", "Description"], rows)


def _no_data(report_date: date) -> str:
    return (
        f'<div style="text-align:center;color:{_COLOR_MUTED};font-style:italic;padding:20px;">'
        f'<h3 style="margin:0 0 8px;">{NO_DATA_TITLE}</h3>'
        f"<p style=\"margin:0;\">No records were found for {report_date.strftime('%d/%m/%Y')}.</p>"
        f"</div>"
    )


def render_report_html(
    report: AggregateReport,
    generated_at: datetime,
    *,
    report_date: date | None = None,
) -> str:
    """
    Render *report* as a complete HTML document.

    ``report_date`` is the calendar day the data belongs to; it defaults to
    the date of ``generated_at``.
    """
    day = report_date or generated_at.date()
    day_text = day.strftime("%d/%m/%Y")
    generated_text = generated_at.strftime("%d/%m/%Y %H:%M:%S")

    cards = "".join(
        [
            _card("Total records", report.total_records, "Records reported today"),
            _card("Active stations", report.active_stations, "Stations reporting today"),
            _card("Coverage", _format_percent(report.station_coverage.percentage),
                  "Of registered stations"),
            _card("Brands", report.distinct_brands, "Distinct flag brands today"),
            _card("Products", len(report.by_product), "Fuel types"),
            _card("Provinces", len(report.by_province), "With reported data"),
        ]
    )

    if report.has_data:
        sections = "".join(
            [
                _section("Records by product", _group_table("Product", report.by_product)),
                _section("Records by province", _group_table(
                    "Province", report.by_province, show_stations=True)),
                _section("Records by station", _group_table("Station", report.by_company)),
                _section("Records by brand", _group_table(
                    "Brand", report.by_brand, show_stations=True)),
                _section("Top localities", _group_table(
                    "Locality", report.by_locality, show_stations=True)),
                _section("Station coverage", _coverage_table(report)),
            ]
        )
    else:
        sections = _no_data(day)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Fuel Price Report - {day_text}</title>
</head>
<body style="margin:0;padding:20px;background:{_COLOR_BG};color:#333333;font-family:'Segoe UI',Tahoma,Geneva,Verdana,sans-serif;">
  <div style="max-width:1200px;margin:0 auto;background:#ffffff;border-radius:10px;overflow:hidden;">
    <div style="background:{_COLOR_HEADER};color:#ffffff;padding:30px;text-align:center;">
      <h1 style="margin:0;font-size:32px;font-weight:300;">Fuel Price Report</h1>
      <p style="margin:10px 0 0;opacity:0.9;font-size:16px;">Data for {day_text} | Generated {generated_text}</p>
    </div>
    <div style="padding:30px;">
      <div style="margin-bottom:30px;">{cards}</div>
      {sections}
    </div>
    <div style="background:{_COLOR_CARD};padding:20px 30px;text-align:center;color:{_COLOR_MUTED};border-top:1px solid {_COLOR_BORDER};">
      <p style="margin:0;">Report generated automatically from the datos.energia.gob.ar API</p>
      <p style="margin:6px 0 0;">Fuel Price Monitoring - Argentina</p>
    </div>
  </div>
</body>
</html>"""


def render_report_text(
    report: AggregateReport,
    generated_at: datetime,
    *,
    report_date: date | None = None,
) -> str:
    """Plain-text alternative body, built from the same report data."""
    day = report_date or generated_at.date()
    lines = [
        f"FUEL PRICE REPORT - {day.strftime('%d/%m/%Y')}",
        f"Generated {generated_at.strftime('%d/%m/%Y %H:%M:%S')}",
        "=" * 50,
        "",
        f"Total records:   {report.total_records}",
        f"Active stations: {report.active_stations} of {report.total_stations}"
        f" ({_format_percent(report.station_coverage.percentage)})",
        f"With prices:     {report.active_stations_with_prices}"
        f" ({_format_percent(report.price_coverage.percentage)})",
        f"Brands:          {report.distinct_brands}",
        "",
    ]

    if not report.has_data:
        lines.append(NO_DATA_TITLE + ".")
        return "\n".join(lines)

    for title, groups in (
        ("BY PRODUCT", report.by_product),
        ("BY PROVINCE", report.by_province),
        ("TOP LOCALITIES", report.by_locality),
    ):
        lines.append(title)
        lines.append("-" * 30)
        for group in groups:
            lines.append(f"  {group.name}: {group.count} ({_format_percent(group.percentage)})")
        lines.append("")

    lines.append("The full report is available in the HTML version of this email.")
    return "\n".join(lines)
