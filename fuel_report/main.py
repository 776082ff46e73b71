from __future__ import annotations

import logging
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fuel_report.config import get_mail_settings, get_server_settings
from fuel_report.logging_utils import configure_logging
from fuel_report.schemas.report import ErrorResponse, HealthResponse
from fuel_report.validators.report_period import INVALID_FORMAT_MESSAGE

SERVICE_NAME = "Fuel Price Report Mailer"

logger = logging.getLogger(__name__)


def _warn_on_incomplete_env() -> None:
    """
    Log every mail setting that will make deliveries fail.

    Nothing here is fatal: the service still starts so /health stays
    reachable, and a trigger surfaces the problem as a delivery error.
    """

    settings = get_mail_settings()
    problems: list[str] = []
    if not settings.recipients:
        problems.append("EMAIL_RECIPIENTS is not set; reports have nowhere to go.")
    if not settings.sender:
        problems.append("Neither EMAIL_FROM nor EMAIL_USER is set; no sender address.")
    if settings.username and not settings.password:
        problems.append("EMAIL_USER is set without EMAIL_PASSWORD; SMTP login is skipped.")

    for problem in problems:
        logger.warning("Incomplete mail configuration: %s", problem)


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Build the shared SMTP pool on boot, verify it in the background, drain it on exit."""
    from fuel_report.mail import get_mail_transport

    transport = get_mail_transport()
    settings = get_mail_settings()
    logger.info(
        "SMTP transport configured host=%s port=%s security=%s pool_size=%d",
        settings.host,
        settings.port,
        settings.security,
        transport.max_connections,
    )
    if settings.verify_on_startup:
        threading.Thread(target=transport.verify, name="smtp-verify", daemon=True).start()

    port = get_server_settings().port
    logger.info("Health check: http://localhost:%s/health", port)
    logger.info("Trigger report: POST/GET http://localhost:%s/trigger-report", port)
    try:
        yield
    finally:
        transport.close()
        logger.info("SMTP transport shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging(get_server_settings().log_level)
    _warn_on_incomplete_env()

    application = FastAPI(
        title=SERVICE_NAME,
        version="1.0.0",
        lifespan=_lifespan,
    )

    from fuel_report.api.routers import report_router

    application.include_router(report_router)

    @application.exception_handler(RequestValidationError)
    async def trigger_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Trigger routes answer malformed periods with the same 400 body as bad date strings.
        if request.url.path != "/trigger-report":
            return await request_validation_exception_handler(request, exc)
        logger.warning("Rejected %s %s errors=%s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=INVALID_FORMAT_MESSAGE).model_dump(exclude_none=True),
        )

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(
            status="OK",
            timestamp=datetime.now(tz=timezone.utc).isoformat(),
            service=SERVICE_NAME,
        )

    return application


app = create_app()
