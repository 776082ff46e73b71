"""
fuel_report/connectors/fuel_price_connector.py

Connector for the public fuel price dataset.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from fuel_report.config import UpstreamAPISettings
from fuel_report.connectors.base import BaseConnector

logger = logging.getLogger(__name__)


class FuelPriceConnector(BaseConnector):
    """
    Fetches the raw fuel price payload with a single GET.

    The endpoint is used as configured; no query parameters are added.
    """

    def __init__(
        self,
        *,
        settings: UpstreamAPISettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            source="fuel_prices",
            timeout_seconds=settings.timeout_seconds,
            session=session,
        )
        self._settings = settings

    def fetch_dataset(self) -> Any:
        headers = {"Content-Type": "application/json"}
        if self._settings.api_key:
            headers["Authorization"] = self._settings.api_key

        logger.info("Fetching upstream dataset url=%s", self._settings.endpoint)
        return self._request_json(
            method="GET",
            url=self._settings.endpoint,
            headers=headers,
        )
