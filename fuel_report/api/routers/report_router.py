"""
fuel_report/api/routers/report_router.py

Report trigger HTTP endpoints.

POST takes the period from the JSON body, GET from the query string (for
external schedulers). Both paths resolve and validate the period the same
way before the pipeline runs.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from fuel_report.errors import ReportValidationError
from fuel_report.schemas.report import (
    ErrorResponse,
    ReportPeriodResponse,
    ReportResultResponse,
    TriggerReportRequest,
    TriggerReportResponse,
)
from fuel_report.services.report_workflow_service import (
    ReportWorkflowService,
    get_report_workflow_service,
)
from fuel_report.validators.report_period import resolve_report_period

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])

SUCCESS_MESSAGE = "Report workflow executed successfully"
FAILURE_MESSAGE = "Failed to execute report workflow"

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def _trigger(
    *,
    route: str,
    start_raw: str | None,
    end_raw: str | None,
    workflow: ReportWorkflowService,
) -> TriggerReportResponse | JSONResponse:
    try:
        period = resolve_report_period(
            start_raw,
            end_raw,
            today=workflow.today(),
            window_days=workflow.settings.default_window_days,
        )
    except ReportValidationError as exc:
        logger.warning("Rejected %s start=%r end=%r error=%s", route, start_raw, end_raw, exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": str(exc)},
        )

    try:
        result = workflow.run(period.start_date, period.end_date)
    except Exception as exc:
        logger.exception("Error in %s: %s", route, exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=ErrorResponse(error=FAILURE_MESSAGE, details=str(exc)).model_dump(),
        )

    return TriggerReportResponse(
        message=SUCCESS_MESSAGE,
        period=ReportPeriodResponse(
            start_date=period.start_date.isoformat(),
            end_date=period.end_date.isoformat(),
        ),
        result=ReportResultResponse(
            success=result.success,
            total_records=result.total_records,
            today_records=result.today_records,
            email_sent=result.email_sent,
            message_id=result.message_id,
        ),
    )


@router.post(
    "/trigger-report",
    response_model=TriggerReportResponse,
    responses=_ERROR_RESPONSES,
)
def trigger_report(
    payload: TriggerReportRequest | None = Body(default=None),
    workflow: ReportWorkflowService = Depends(get_report_workflow_service),
) -> TriggerReportResponse | JSONResponse:
    """
    Run the report pipeline for an optional explicit period.
    """

    payload = payload or TriggerReportRequest()
    return _trigger(
        route="POST /trigger-report",
        start_raw=payload.start_date,
        end_raw=payload.end_date,
        workflow=workflow,
    )


@router.get(
    "/trigger-report",
    response_model=TriggerReportResponse,
    responses=_ERROR_RESPONSES,
)
def trigger_report_from_query(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    workflow: ReportWorkflowService = Depends(get_report_workflow_service),
) -> TriggerReportResponse | JSONResponse:
    """
    Run the report pipeline with the period taken from query parameters.
    """

    return _trigger(
        route="GET /trigger-report",
        start_raw=start_date,
        end_raw=end_date,
        workflow=workflow,
    )
