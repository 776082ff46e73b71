"""
Shared fakes and fixtures for the report mailer tests.
"""

from __future__ import annotations

import smtplib
from datetime import datetime, timedelta, timezone
from email.message import EmailMessage
from typing import Any

import pytest

from fuel_report.config import MailPoolSettings, MailRetrySettings, MailSettings, ReportSettings
from fuel_report.mail.mailer import Mailer
from fuel_report.mail.pool import SMTPConnectionPool
from fuel_report.mail.rate_limiter import RateLimiter
from fuel_report.services.report_workflow_service import ReportWorkflowService

UTC_MINUS_3 = timezone(timedelta(hours=-3))
FIXED_NOW = datetime(2024, 3, 10, 12, 0, tzinfo=UTC_MINUS_3)


class FakeSMTP:
    """
    Stand-in for ``smtplib.SMTP`` that replays scripted send outcomes.

    ``outcomes`` is shared by every connection from the same factory; each
    ``send_message`` pops the next entry and raises it when it is an exception.
    """

    def __init__(self, outbox: list[EmailMessage], outcomes: list[BaseException | None]) -> None:
        self._outbox = outbox
        self._outcomes = outcomes
        self.closed = False
        self.sent = 0

    def send_message(self, msg: EmailMessage, from_addr: str | None = None, to_addrs: Any = None) -> dict:
        outcome = self._outcomes.pop(0) if self._outcomes else None
        if outcome is not None:
            raise outcome
        self._outbox.append(msg)
        self.sent += 1
        return {}

    def noop(self) -> tuple[int, bytes]:
        if self.closed:
            raise smtplib.SMTPServerDisconnected("closed")
        return 250, b"OK"

    def quit(self) -> tuple[int, bytes]:
        self.closed = True
        return 221, b"Bye"

    def close(self) -> None:
        self.closed = True


class FakeSMTPFactory:
    def __init__(self, outcomes: list[BaseException | None] | None = None) -> None:
        self.outbox: list[EmailMessage] = []
        self.outcomes = list(outcomes or [])
        self.connections: list[FakeSMTP] = []

    def __call__(self) -> FakeSMTP:
        connection = FakeSMTP(self.outbox, self.outcomes)
        self.connections.append(connection)
        return connection


class FakeConnector:
    """Connector double returning a canned payload (or raising)."""

    source = "fake"

    def __init__(self, payload: Any = None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls = 0

    def fetch_dataset(self) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


def make_pool(factory: FakeSMTPFactory, **pool_kwargs: Any) -> SMTPConnectionPool:
    return SMTPConnectionPool(
        settings=MailSettings(host="smtp.test", port=587, sender="reports@example.com"),
        pool_settings=MailPoolSettings(**pool_kwargs),
        connection_factory=factory,
        rate_limiter=RateLimiter(rate_limit_per_second=10_000),
    )


def make_mailer(
    factory: FakeSMTPFactory,
    *,
    max_attempts: int = 3,
    sleeps: list[float] | None = None,
) -> Mailer:
    recorded = sleeps if sleeps is not None else []
    return Mailer(
        pool=make_pool(factory),
        sender="reports@example.com",
        retry_settings=MailRetrySettings(max_attempts=max_attempts, base_delay_seconds=2.0),
        sleep=recorded.append,
    )


def record(**fields: Any) -> dict[str, Any]:
    base = {
        "fecha_vigencia": "2024-03-10T08:00:00",
        "producto": "Nafta",
        "provincia": "BUENOS AIRES",
        "localidad": "LA PLATA",
        "empresa": "ESTACION 1",
        "idempresa": 1,
        "empresabandera": "YPF",
        "precio": 850.5,
    }
    base.update(fields)
    return base


def envelope(records: list[dict[str, Any]]) -> dict[str, Any]:
    return {"success": True, "result": {"records": records}}


@pytest.fixture()
def smtp_factory() -> FakeSMTPFactory:
    return FakeSMTPFactory()


@pytest.fixture()
def make_workflow(smtp_factory: FakeSMTPFactory):
    """Build a workflow service over a fake connector and the fake SMTP factory."""

    def _build(connector: FakeConnector, recipients: tuple[str, ...] = ("ops@example.com",)) -> ReportWorkflowService:
        return ReportWorkflowService(
            connector=connector,
            mailer=make_mailer(smtp_factory),
            recipients=recipients,
            settings=ReportSettings(),
            clock=lambda: FIXED_NOW,
        )

    return _build
