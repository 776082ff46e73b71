"""
fuel_report/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

# Deployments point API_ENDPOINT at the full datastore_search URL, resource_id included.
DEFAULT_API_ENDPOINT = "http://datos.energia.gob.ar/api/3/action/datastore_search"
DEFAULT_DATE_FIELDS = (
    "fecha_vigencia",
    "fecha",
    "indice_tiempo",
    "date",
    "created_at",
    "timestamp",
)

_ALLOWED_SECURITY_MODES = {"ssl", "starttls", "none"}
_IMPLICIT_TLS_PORT = 465


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(*names: str) -> str | None:
    """
    Read the first non-empty value among several environment variable names.
    """

    _load_env_once()
    for name in names:
        value = os.getenv(name)
        if value is None:
            continue
        stripped = value.strip()
        if stripped:
            return stripped
    return None


def _get_csv_env(name: str, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    """
    Read a comma-separated list, dropping empty items.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    items = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class UpstreamAPISettings:
    """
    Settings for the upstream fuel price API.
    """

    endpoint: str = DEFAULT_API_ENDPOINT
    api_key: str | None = None
    timeout_seconds: float = 30.0


@dataclass(frozen=True)
class MailSettings:
    """
    SMTP connection settings.

    ``security`` is one of ``ssl`` (TLS from connect), ``starttls``
    (TLS negotiated after EHLO) or ``none``.
    """

    host: str = "smtp.gmail.com"
    port: int = 587
    security: str = "starttls"
    username: str | None = None
    password: str | None = None
    sender: str | None = None
    recipients: tuple[str, ...] = ()
    connection_timeout_seconds: float = 60.0
    socket_timeout_seconds: float = 60.0
    debug: bool = False
    verify_on_startup: bool = True


@dataclass(frozen=True)
class MailPoolSettings:
    """
    Bounds for the shared SMTP connection pool.
    """

    max_connections: int = 3
    max_messages_per_connection: int = 10
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class MailRetrySettings:
    """
    Delivery retry policy: waits grow linearly (attempt * base delay).
    """

    max_attempts: int = 3
    base_delay_seconds: float = 2.0


@dataclass(frozen=True)
class ReportSettings:
    """
    Report filtering and aggregation settings.
    """

    utc_offset_hours: int = -3
    date_fields: tuple[str, ...] = DEFAULT_DATE_FIELDS
    locality_limit: int = 10
    default_window_days: int = 7


@dataclass(frozen=True)
class ServerSettings:
    """
    HTTP server bind settings.
    """

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"


def resolve_security_mode(port: int, raw_mode: str | None, force_ssl: bool = False) -> str:
    """
    Pick the SMTP security mode.

    An explicit valid mode wins; otherwise implicit TLS is used on port 465
    (or when forced) and STARTTLS everywhere else.
    """

    if raw_mode:
        mode = raw_mode.strip().lower()
        if mode not in _ALLOWED_SECURITY_MODES:
            raise RuntimeError(
                f"EMAIL_SECURITY '{raw_mode.strip()}' is not valid. "
                f"Allowed values: {sorted(_ALLOWED_SECURITY_MODES)}."
            )
        return mode
    if force_ssl or port == _IMPLICIT_TLS_PORT:
        return "ssl"
    return "starttls"


@lru_cache(maxsize=1)
def get_upstream_api_settings() -> UpstreamAPISettings:
    """
    Return cached upstream API settings from environment variables.
    """

    return UpstreamAPISettings(
        endpoint=_get_str_env("API_ENDPOINT", DEFAULT_API_ENDPOINT),
        api_key=_get_optional_str_env("API_KEY"),
        timeout_seconds=max(1.0, _get_float_env("API_TIMEOUT_SECONDS", 30.0)),
    )


@lru_cache(maxsize=1)
def get_mail_settings() -> MailSettings:
    """
    Return cached SMTP settings from environment variables.

    ``EMAIL_*`` names take precedence over the generic ``SMTP_*`` names.
    """

    port_raw = _get_optional_str_env("EMAIL_PORT", "SMTP_PORT")
    try:
        port = int(port_raw) if port_raw else 587
    except ValueError:
        port = 587

    username = _get_optional_str_env("EMAIL_USER", "SMTP_USER")
    return MailSettings(
        host=_get_optional_str_env("EMAIL_HOST", "SMTP_HOST") or "smtp.gmail.com",
        port=port,
        security=resolve_security_mode(
            port,
            _get_optional_str_env("EMAIL_SECURITY"),
            force_ssl=_get_bool_env("EMAIL_SECURE", False),
        ),
        username=username,
        password=_get_optional_str_env("EMAIL_PASSWORD", "SMTP_PASSWORD"),
        sender=_get_optional_str_env("EMAIL_FROM") or username,
        recipients=_get_csv_env("EMAIL_RECIPIENTS"),
        connection_timeout_seconds=max(1.0, _get_float_env("EMAIL_CONNECTION_TIMEOUT_SECONDS", 60.0)),
        socket_timeout_seconds=max(1.0, _get_float_env("EMAIL_SOCKET_TIMEOUT_SECONDS", 60.0)),
        debug=_get_bool_env("EMAIL_DEBUG", False),
        verify_on_startup=_get_bool_env("EMAIL_VERIFY_ON_STARTUP", True),
    )


@lru_cache(maxsize=1)
def get_mail_pool_settings() -> MailPoolSettings:
    """
    Return cached SMTP pool bounds from environment variables.
    """

    return MailPoolSettings(
        max_connections=max(1, _get_int_env("EMAIL_MAX_CONNECTIONS", 3)),
        max_messages_per_connection=max(1, _get_int_env("EMAIL_MAX_MESSAGES", 10)),
        rate_limit_per_second=max(0.1, _get_float_env("EMAIL_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_mail_retry_settings() -> MailRetrySettings:
    """
    Return cached delivery retry settings.
    """

    return MailRetrySettings(
        max_attempts=max(1, _get_int_env("EMAIL_MAX_ATTEMPTS", 3)),
        base_delay_seconds=max(0.0, _get_float_env("EMAIL_RETRY_BASE_DELAY_SECONDS", 2.0)),
    )


@lru_cache(maxsize=1)
def get_report_settings() -> ReportSettings:
    """
    Return cached report settings.
    """

    return ReportSettings(
        utc_offset_hours=_get_int_env("REPORT_UTC_OFFSET_HOURS", -3),
        date_fields=_get_csv_env("REPORT_DATE_FIELDS", DEFAULT_DATE_FIELDS),
        locality_limit=max(1, _get_int_env("REPORT_LOCALITY_LIMIT", 10)),
        default_window_days=max(0, _get_int_env("REPORT_DEFAULT_WINDOW_DAYS", 7)),
    )


@lru_cache(maxsize=1)
def get_server_settings() -> ServerSettings:
    """
    Return cached HTTP server settings.
    """

    return ServerSettings(
        host=_get_str_env("HOST", "0.0.0.0"),
        port=_get_int_env("PORT", 3000),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
