"""
fuel_report/connectors/base.py

Base connector abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from fuel_report.errors import UpstreamFetchError

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """
    Connector interface for fetching one upstream dataset.

    Requests are issued exactly once: a failure is surfaced to the caller
    as :class:`UpstreamFetchError` and aborts the workflow.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    @abstractmethod
    def fetch_dataset(self) -> Any:
        """
        Fetch the upstream payload as parsed JSON.
        """

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute an HTTP request and return parsed JSON.
        """

        response = self._request(method=method, url=url, headers=headers)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamFetchError(f"{self.source}: response was not valid JSON.") from exc

    def _request(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        try:
            response = self._session.request(
                method=method,
                url=url,
                headers=headers,
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.error(
                "Connector request failed source=%s status=%s url=%s error=%s",
                self.source,
                status_code,
                url,
                exc,
            )
            raise UpstreamFetchError(f"Failed to fetch API data: {exc}") from exc
        except requests.RequestException as exc:
            logger.error(
                "Connector request failed source=%s url=%s error=%s",
                self.source,
                url,
                exc,
            )
            raise UpstreamFetchError(f"Failed to fetch API data: {exc}") from exc
        return response
