"""
app/domain/price_record.py

Domain models used by the price ingestion and query flows.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date

RawRow = Mapping[str, str]

DATE_COLUMN = "Date"
SYMBOL_COLUMN = "Symbol"
SERIES_COLUMN = "Series"

# Header order of the upstream export; "%Deliverble" is spelled as the export spells it.
CSV_COLUMNS: tuple[str, ...] = (
    DATE_COLUMN,
    SYMBOL_COLUMN,
    SERIES_COLUMN,
    "Prev Close",
    "Open",
    "High",
    "Low",
    "Last",
    "Close",
    "VWAP",
    "Volume",
    "Turnover",
    "Trades",
    "Deliverable Volume",
    "%Deliverble",
)

INSERTION_ERROR_REASON = "Database insertion error"


class FailureStage:
    VALIDATION = "validation"
    PERSISTENCE = "persistence"


@dataclass(frozen=True)
class PriceRecord:
    """
    Typed daily trading record for one symbol, ready for persistence.
    """

    date: date
    symbol: str
    series: str
    prev_close: float
    open: float
    high: float
    low: float
    last: float
    close: float
    vwap: float
    volume: int
    turnover: float
    trades: int
    deliverable_volume: int
    percent_deliverable: float


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive calendar date range used by analytical queries.
    """

    start: date
    end: date

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.end


@dataclass(frozen=True)
class RowFailure:
    """
    One rejected CSV row and the reasons it was rejected.
    """

    row: dict[str, str]
    reasons: tuple[str, ...]
    stage: str = FailureStage.VALIDATION


@dataclass(frozen=True)
class IngestionReport:
    """
    End-of-run ingestion report.
    """

    total_records: int
    successful_records: int
    failed_records: int
    errors: tuple[RowFailure, ...] = field(default_factory=tuple)
