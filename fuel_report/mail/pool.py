"""
fuel_report/mail/pool.py

Bounded, thread-safe pool of SMTP connections.

One pool is built per process and shared by every request. At most
``max_connections`` connections are checked out at once; each connection
is closed and replaced after ``max_messages_per_connection`` messages, and
every checkout passes through the shared rate limiter. Connections that
raise while checked out are discarded instead of being returned.
"""

from __future__ import annotations

import logging
import smtplib
import ssl
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from fuel_report.config import MailPoolSettings, MailSettings
from fuel_report.mail.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], smtplib.SMTP]


@dataclass
class _PooledConnection:
    smtp: smtplib.SMTP
    messages_sent: int = 0


def _quit_quietly(smtp: smtplib.SMTP) -> None:
    try:
        smtp.quit()
    except (smtplib.SMTPException, OSError):
        smtp.close()


class SMTPConnectionPool:
    """
    Shared SMTP transport with connection reuse.

    Parameters
    ----------
    settings:
        Host, port, security mode, credentials and timeouts.
    pool_settings:
        Connection, per-connection message and send-rate ceilings.
    connection_factory:
        Opens a ready-to-use connection. Defaults to :meth:`open_connection`.
    """

    def __init__(
        self,
        *,
        settings: MailSettings,
        pool_settings: MailPoolSettings,
        connection_factory: ConnectionFactory | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self._settings = settings
        self._max_connections = max(1, pool_settings.max_connections)
        self._max_messages = max(1, pool_settings.max_messages_per_connection)
        self._slots = threading.BoundedSemaphore(self._max_connections)
        self._idle: list[_PooledConnection] = []
        self._lock = threading.Lock()
        self._closed = False
        self._connection_factory = connection_factory or self.open_connection
        self._rate_limiter = rate_limiter or RateLimiter(
            rate_limit_per_second=pool_settings.rate_limit_per_second,
        )

    @property
    def max_connections(self) -> int:
        return self._max_connections

    @property
    def idle_count(self) -> int:
        with self._lock:
            return len(self._idle)

    def open_connection(self) -> smtplib.SMTP:
        """
        Connect, negotiate TLS per the security mode, and authenticate.
        """

        s = self._settings
        if s.security == "ssl":
            smtp: smtplib.SMTP = smtplib.SMTP_SSL(
                s.host,
                s.port,
                timeout=s.connection_timeout_seconds,
                context=ssl.create_default_context(),
            )
        else:
            smtp = smtplib.SMTP(s.host, s.port, timeout=s.connection_timeout_seconds)

        try:
            if s.debug:
                smtp.set_debuglevel(1)
            smtp.ehlo()
            if s.security == "starttls":
                smtp.starttls(context=ssl.create_default_context())
                smtp.ehlo()
            if smtp.sock is not None:
                smtp.sock.settimeout(s.socket_timeout_seconds)
            if s.username and s.password:
                smtp.login(s.username, s.password)
        except (smtplib.SMTPException, OSError):
            _quit_quietly(smtp)
            raise

        logger.debug("Opened SMTP connection host=%s port=%s security=%s", s.host, s.port, s.security)
        return smtp

    @contextmanager
    def connection(self) -> Iterator[smtplib.SMTP]:
        """
        Check out a connection for sending exactly one message.
        """

        if self._closed:
            raise smtplib.SMTPServerDisconnected("SMTP connection pool is closed.")

        self._slots.acquire()
        pooled: _PooledConnection | None = None
        try:
            pooled = self._checkout()
            self._rate_limiter.wait()
            yield pooled.smtp
            pooled.messages_sent += 1
        except Exception:
            if pooled is not None:
                _quit_quietly(pooled.smtp)
                pooled = None
            raise
        finally:
            if pooled is not None:
                self._checkin(pooled)
            self._slots.release()

    def verify(self) -> bool:
        """
        Open a connection and issue NOOP. Logs the outcome, never raises.
        """

        s = self._settings
        try:
            smtp = self._connection_factory()
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                "SMTP verification failed host=%s port=%s security=%s error=%s",
                s.host,
                s.port,
                s.security,
                exc,
            )
            return False

        try:
            code, _ = smtp.noop()
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP verification NOOP failed host=%s error=%s", s.host, exc)
            return False
        finally:
            _quit_quietly(smtp)

        logger.info("SMTP server is ready host=%s port=%s code=%s", s.host, s.port, code)
        return code == 250

    def close(self) -> None:
        """
        Stop handing out connections and quit every idle one.
        """

        with self._lock:
            self._closed = True
            idle, self._idle = self._idle, []

        for pooled in idle:
            _quit_quietly(pooled.smtp)
        logger.info("SMTP connection pool closed connections=%d", len(idle))

    def _checkout(self) -> _PooledConnection:
        while True:
            with self._lock:
                pooled = self._idle.pop() if self._idle else None
            if pooled is None:
                return _PooledConnection(smtp=self._connection_factory())
            if self._is_alive(pooled.smtp):
                return pooled
            _quit_quietly(pooled.smtp)

    def _checkin(self, pooled: _PooledConnection) -> None:
        if pooled.messages_sent >= self._max_messages:
            logger.debug("Recycling SMTP connection after %d messages", pooled.messages_sent)
            _quit_quietly(pooled.smtp)
            return

        with self._lock:
            if not self._closed:
                self._idle.append(pooled)
                return
        _quit_quietly(pooled.smtp)

    @staticmethod
    def _is_alive(smtp: smtplib.SMTP) -> bool:
        try:
            code, _ = smtp.noop()
        except (smtplib.SMTPException, OSError):
            return False
        return code == 250
