"""
fuel_report/services/report_workflow_service.py

Orchestration of one report trigger: fetch, filter, aggregate, render, send.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from functools import lru_cache
from typing import Callable, Sequence

from fuel_report.config import (
    ReportSettings,
    get_mail_settings,
    get_report_settings,
    get_upstream_api_settings,
)
from fuel_report.connectors import BaseConnector, FuelPriceConnector
from fuel_report.domain.fuel_prices import ReportWorkflowResult
from fuel_report.mail import Mailer, get_mailer
from fuel_report.services.aggregation_service import aggregate
from fuel_report.services.date_filter import (
    extract_records,
    filter_by_range,
    filter_today,
    report_timezone,
)
from fuel_report.services.report_renderer import (
    build_subject,
    render_report_html,
    render_report_text,
)

logger = logging.getLogger(__name__)


class ReportWorkflowService:
    """
    Runs the report pipeline sequentially; any stage failure propagates.
    """

    def __init__(
        self,
        *,
        connector: BaseConnector,
        mailer: Mailer,
        recipients: Sequence[str],
        settings: ReportSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._connector = connector
        self._mailer = mailer
        self._recipients = tuple(recipients)
        self._settings = settings
        self._clock = clock or (lambda: datetime.now(tz=report_timezone(settings.utc_offset_hours)))

    @property
    def settings(self) -> ReportSettings:
        return self._settings

    def today(self) -> date:
        """Current calendar date at the report offset."""
        return self._clock().date()

    def run(self, start_date: date, end_date: date) -> ReportWorkflowResult:
        """
        Execute the full pipeline for the ``[start_date, end_date]`` period.
        """

        logger.info("Starting report workflow for period: %s - %s", start_date, end_date)
        settings = self._settings

        logger.info("Fetching data from API...")
        payload = self._connector.fetch_dataset()

        logger.info("Filtering data by date...")
        range_records = filter_by_range(
            payload,
            start_date,
            end_date,
            candidates=settings.date_fields,
            utc_offset_hours=settings.utc_offset_hours,
        )
        generated_at = self._clock()
        report_day = generated_at.date()
        today_records = filter_today(
            payload,
            today=report_day,
            candidates=settings.date_fields,
            utc_offset_hours=settings.utc_offset_hours,
        )

        logger.info("Generating report...")
        report = aggregate(
            today_records,
            extract_records(payload),
            locality_limit=settings.locality_limit,
        )
        html_body = render_report_html(report, generated_at, report_date=report_day)
        text_body = render_report_text(report, generated_at, report_date=report_day)

        logger.info("Sending email...")
        receipt = self._mailer.send(
            html_body,
            build_subject(report_day),
            self._recipients,
            text_body=text_body,
        )

        logger.info(
            "Report workflow completed range_records=%d today_records=%d message_id=%s",
            len(range_records),
            report.total_records,
            receipt.message_id,
        )
        return ReportWorkflowResult(
            success=True,
            total_records=len(range_records),
            today_records=report.total_records,
            email_sent=True,
            message_id=receipt.message_id,
        )


@lru_cache(maxsize=1)
def get_report_workflow_service() -> ReportWorkflowService:
    """
    Build and cache the report workflow service.
    """

    return ReportWorkflowService(
        connector=FuelPriceConnector(settings=get_upstream_api_settings()),
        mailer=get_mailer(),
        recipients=get_mail_settings().recipients,
        settings=get_report_settings(),
    )
