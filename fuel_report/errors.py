"""
fuel_report/errors.py

Error kinds raised by the report workflow.
"""

from __future__ import annotations


class ReportError(RuntimeError):
    """
    Base class for failures that abort a report trigger.
    """


class UpstreamFetchError(ReportError):
    """
    Raised when the upstream API is unreachable or answers with a failure status.
    """


class ReportValidationError(ReportError, ValueError):
    """
    Raised when a requested report period is malformed or inverted.
    """


class DeliveryError(ReportError):
    """
    Raised when the mail transport exhausted its attempt budget.
    """

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts
