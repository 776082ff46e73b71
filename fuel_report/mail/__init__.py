"""
fuel_report/mail package marker.
"""

from fuel_report.mail.mailer import Mailer, describe_smtp_error, get_mail_transport, get_mailer
from fuel_report.mail.pool import SMTPConnectionPool
from fuel_report.mail.rate_limiter import RateLimiter

__all__ = [
    "Mailer",
    "RateLimiter",
    "SMTPConnectionPool",
    "describe_smtp_error",
    "get_mail_transport",
    "get_mailer",
]
