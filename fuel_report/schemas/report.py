"""
fuel_report/schemas/report.py

Request and response schemas for the report trigger endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TriggerReportRequest(BaseModel):
    """
    Optional explicit report period (ISO calendar dates).
    """

    model_config = ConfigDict(populate_by_name=True)

    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")


class ReportPeriodResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_date: str = Field(..., alias="startDate")
    end_date: str = Field(..., alias="endDate")


class ReportResultResponse(BaseModel):
    """
    Outcome of one pipeline execution.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    total_records: int = Field(..., ge=0, alias="totalRecords")
    today_records: int = Field(..., ge=0, alias="todayRecords")
    email_sent: bool = Field(..., alias="emailSent")
    message_id: str | None = Field(default=None, alias="messageId")


class TriggerReportResponse(BaseModel):
    message: str
    period: ReportPeriodResponse
    result: ReportResultResponse


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    service: str
