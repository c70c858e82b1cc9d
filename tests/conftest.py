"""
Shared fixtures: an in-memory price gateway and CSV builders.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence

import pytest

from app.domain.price_record import CSV_COLUMNS, DateRange, PriceRecord
from app.repositories.price_record_repository import PriceRecordPersistenceError

VALID_ROW: dict[str, str] = {
    "Date": "2021-04-30",
    "Symbol": "INFY",
    "Series": "EQ",
    "Prev Close": "1364.05",
    "Open": "1360.0",
    "High": "1375.5",
    "Low": "1352.1",
    "Last": "1355.0",
    "Close": "1354.35",
    "VWAP": "1362.47",
    "Volume": "6021534",
    "Turnover": "820432153245000.0",
    "Trades": "184256",
    "Deliverable Volume": "3104578",
    "%Deliverble": "0.5156",
}


class InMemoryPriceGateway:
    """
    Thread-safe stand-in for the SQLAlchemy price repository.
    """

    def __init__(
        self,
        *,
        fail_symbols: Sequence[str] = (),
        insert_delay: float = 0.0,
    ) -> None:
        self._lock = threading.Lock()
        self._fail_symbols = frozenset(fail_symbols)
        self._insert_delay = insert_delay
        self.records: list[PriceRecord] = []
        self.in_flight = 0
        self.max_in_flight_seen = 0
        self.insert_threads: set[str] = set()

    def insert(self, record: PriceRecord) -> None:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight_seen = max(self.max_in_flight_seen, self.in_flight)
            self.insert_threads.add(threading.current_thread().name)
        try:
            if self._insert_delay:
                time.sleep(self._insert_delay)
            if record.symbol in self._fail_symbols:
                raise PriceRecordPersistenceError(f"rejected {record.symbol}")
            with self._lock:
                self.records.append(record)
        finally:
            with self._lock:
                self.in_flight -= 1

    def find_max_by(
        self,
        field: str,
        date_range: DateRange,
        symbol: str | None = None,
    ) -> PriceRecord | None:
        return max(
            self._matching(date_range, symbol),
            key=lambda record: getattr(record, field),
            default=None,
        )

    def average(
        self,
        field: str,
        date_range: DateRange,
        symbol: str | None = None,
    ) -> float | None:
        values = [getattr(record, field) for record in self._matching(date_range, symbol)]
        if not values:
            return None
        return sum(values) / len(values)

    def _matching(self, date_range: DateRange, symbol: str | None) -> list[PriceRecord]:
        return [
            record
            for record in self.records
            if date_range.contains(record.date) and (not symbol or record.symbol == symbol)
        ]


class FailingQueryGateway(InMemoryPriceGateway):
    def find_max_by(self, field, date_range, symbol=None):  # type: ignore[override]
        raise PriceRecordPersistenceError("store offline")

    def average(self, field, date_range, symbol=None):  # type: ignore[override]
        raise PriceRecordPersistenceError("store offline")


def _quote(cell: str) -> str:
    if any(char in cell for char in ',"\n'):
        return '"' + cell.replace('"', '""') + '"'
    return cell


def build_csv(rows: Sequence[dict[str, str]], columns: Sequence[str] = CSV_COLUMNS) -> str:
    lines = [",".join(_quote(column) for column in columns)]
    for row in rows:
        lines.append(",".join(_quote(row.get(column, "")) for column in columns))
    return "\n".join(lines) + "\n"


def make_row(**overrides: str) -> dict[str, str]:
    """
    Copy of VALID_ROW with columns overridden; keyword names use underscores
    for spaces, e.g. ``Prev_Close="x"``.
    """

    row = dict(VALID_ROW)
    for key, value in overrides.items():
        row[key.replace("_", " ")] = value
    return row


@pytest.fixture()
def gateway() -> InMemoryPriceGateway:
    return InMemoryPriceGateway()


@pytest.fixture()
def csv_builder() -> Callable[..., str]:
    return build_csv
