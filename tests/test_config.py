"""
tests/test_config.py

Environment-driven settings and SMTP security mode selection.
"""

from __future__ import annotations

import pytest

import fuel_report.config as config
from fuel_report.config import (
    get_mail_pool_settings,
    get_mail_retry_settings,
    get_mail_settings,
    get_report_settings,
    resolve_security_mode,
)

_MAIL_VARS = (
    "EMAIL_HOST",
    "SMTP_HOST",
    "EMAIL_PORT",
    "SMTP_PORT",
    "EMAIL_SECURE",
    "EMAIL_SECURITY",
    "EMAIL_USER",
    "SMTP_USER",
    "EMAIL_PASSWORD",
    "SMTP_PASSWORD",
    "EMAIL_FROM",
    "EMAIL_RECIPIENTS",
    "EMAIL_MAX_CONNECTIONS",
    "EMAIL_MAX_ATTEMPTS",
    "REPORT_DATE_FIELDS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.setattr(config, "load_env_files", lambda: None)
    config._load_env_once.cache_clear()
    for name in _MAIL_VARS:
        monkeypatch.delenv(name, raising=False)
    for factory in (get_mail_settings, get_mail_pool_settings, get_mail_retry_settings, get_report_settings):
        factory.cache_clear()
    yield
    for factory in (get_mail_settings, get_mail_pool_settings, get_mail_retry_settings, get_report_settings):
        factory.cache_clear()
    config._load_env_once.cache_clear()


class TestResolveSecurityMode:
    def test_port_465_uses_implicit_tls(self) -> None:
        assert resolve_security_mode(465, None) == "ssl"

    def test_other_ports_use_starttls(self) -> None:
        assert resolve_security_mode(587, None) == "starttls"
        assert resolve_security_mode(25, "") == "starttls"

    def test_force_flag_selects_ssl(self) -> None:
        assert resolve_security_mode(587, None, force_ssl=True) == "ssl"

    def test_explicit_mode_wins(self) -> None:
        assert resolve_security_mode(465, "STARTTLS") == "starttls"
        assert resolve_security_mode(25, "none") == "none"

    def test_unknown_mode_is_rejected(self) -> None:
        with pytest.raises(RuntimeError, match="EMAIL_SECURITY"):
            resolve_security_mode(587, "tls1.3")


class TestMailSettings:
    def test_defaults(self) -> None:
        settings = get_mail_settings()
        assert settings.host == "smtp.gmail.com"
        assert settings.port == 587
        assert settings.security == "starttls"
        assert settings.recipients == ()
        assert settings.sender is None

    def test_email_names_take_precedence_over_smtp_names(self, monkeypatch) -> None:
        monkeypatch.setenv("SMTP_HOST", "smtp.fallback.test")
        monkeypatch.setenv("EMAIL_HOST", "smtp.primary.test")
        monkeypatch.setenv("SMTP_PORT", "465")
        settings = get_mail_settings()
        assert settings.host == "smtp.primary.test"
        assert settings.port == 465
        assert settings.security == "ssl"

    def test_sender_falls_back_to_username(self, monkeypatch) -> None:
        monkeypatch.setenv("EMAIL_USER", "robot@example.com")
        assert get_mail_settings().sender == "robot@example.com"

        monkeypatch.setenv("EMAIL_FROM", "reports@example.com")
        get_mail_settings.cache_clear()
        assert get_mail_settings().sender == "reports@example.com"

    def test_recipients_split_on_commas(self, monkeypatch) -> None:
        monkeypatch.setenv("EMAIL_RECIPIENTS", " a@example.com, ,b@example.com ,")
        assert get_mail_settings().recipients == ("a@example.com", "b@example.com")

    def test_secure_flag_forces_ssl(self, monkeypatch) -> None:
        monkeypatch.setenv("EMAIL_SECURE", "true")
        assert get_mail_settings().security == "ssl"

    def test_invalid_port_falls_back_to_default(self, monkeypatch) -> None:
        monkeypatch.setenv("EMAIL_PORT", "smtp")
        assert get_mail_settings().port == 587


class TestOtherSettings:
    def test_pool_and_retry_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("EMAIL_MAX_CONNECTIONS", "0")
        monkeypatch.setenv("EMAIL_MAX_ATTEMPTS", "5")
        assert get_mail_pool_settings().max_connections == 1
        assert get_mail_retry_settings().max_attempts == 5

    def test_date_field_candidates_override(self, monkeypatch) -> None:
        monkeypatch.setenv("REPORT_DATE_FIELDS", "fecha,date")
        assert get_report_settings().date_fields == ("fecha", "date")

    def test_report_defaults(self) -> None:
        settings = get_report_settings()
        assert settings.utc_offset_hours == -3
        assert settings.date_fields[0] == "fecha_vigencia"
        assert settings.locality_limit == 10
