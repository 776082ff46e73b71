"""
fuel_report/domain/fuel_prices.py

Domain models for the fuel price report workflow.

Records are kept as the raw JSON mappings returned by the upstream API;
everything below is derived from them for a single trigger and discarded
once the email is sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

Record = Mapping[str, Any]

# Upstream field names (datos.energia.gob.ar fuel price dataset).
FIELD_PRODUCT = "producto"
FIELD_PROVINCE = "provincia"
FIELD_LOCALITY = "localidad"
FIELD_COMPANY = "empresa"
FIELD_COMPANY_ID = "idempresa"
FIELD_BRAND = "empresabandera"
FIELD_PRICE = "precio"

UNSPECIFIED = "unspecified"


@dataclass(frozen=True)
class GroupSummary:
    """
    Records sharing one value of a grouping dimension.
    """

    name: str
    count: int
    distinct_entity_count: int
    percentage: float
    records: tuple[Record, ...] = field(default=(), repr=False, compare=False)


@dataclass(frozen=True)
class CoverageStat:
    """
    Ratio of entities meeting a stricter condition over a looser baseline.
    """

    numerator: int
    denominator: int
    percentage: float


@dataclass(frozen=True)
class AggregateReport:
    """
    Full aggregation output for one report run.
    """

    total_records: int
    by_product: list[GroupSummary]
    by_province: list[GroupSummary]
    by_company: list[GroupSummary]
    by_brand: list[GroupSummary]
    by_locality: list[GroupSummary]
    station_coverage: CoverageStat
    """Stations active today over stations ever seen in the dataset."""

    price_coverage: CoverageStat
    """Stations active today with a positive price over stations active today."""

    distinct_brands: int

    @property
    def has_data(self) -> bool:
        return self.total_records > 0

    @property
    def total_stations(self) -> int:
        return self.station_coverage.denominator

    @property
    def active_stations(self) -> int:
        return self.station_coverage.numerator

    @property
    def active_stations_with_prices(self) -> int:
        return self.price_coverage.numerator


@dataclass(frozen=True)
class DeliveryReceipt:
    """
    Outcome of a successful email delivery.
    """

    message_id: str
    attempts: int
    recipients: tuple[str, ...]
    accepted_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


@dataclass(frozen=True)
class ReportWorkflowResult:
    """
    Summary returned to the HTTP caller after a full pipeline run.
    """

    success: bool
    total_records: int
    today_records: int
    email_sent: bool
    message_id: str | None
