"""
fuel_report/connectors package marker.
"""

from fuel_report.connectors.base import BaseConnector
from fuel_report.connectors.fuel_price_connector import FuelPriceConnector

__all__ = [
    "BaseConnector",
    "FuelPriceConnector",
]
