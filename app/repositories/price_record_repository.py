"""
app/repositories/price_record_repository.py

Persistence layer for daily stock price records.

Each insert opens and commits its own session so that ingestion worker
threads never share a session or a transaction.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.price_record import DateRange, PriceRecord
from db.models.stock_price import StockPrice

SessionFactory = Callable[[], Session]

NUMERIC_FIELDS: frozenset[str] = frozenset(
    {
        "prev_close",
        "open",
        "high",
        "low",
        "last",
        "close",
        "vwap",
        "volume",
        "turnover",
        "trades",
        "deliverable_volume",
        "percent_deliverable",
    }
)


class PriceRecordPersistenceError(RuntimeError):
    """
    Raised when the price store rejects a write or cannot answer a query.
    """


class PriceRecordGateway(Protocol):
    """
    Storage operations consumed by ingestion and analytical queries.
    """

    def insert(self, record: PriceRecord) -> None:
        ...

    def find_max_by(
        self,
        field: str,
        date_range: DateRange,
        symbol: str | None = None,
    ) -> PriceRecord | None:
        ...

    def average(
        self,
        field: str,
        date_range: DateRange,
        symbol: str | None = None,
    ) -> float | None:
        ...


class PriceRecordRepository:
    """
    SQLAlchemy-backed price record gateway.
    """

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory: SessionFactory = SessionLocal
        else:
            self._session_factory = session_factory

    def insert(self, record: PriceRecord) -> None:
        """
        Persist one record in its own transaction.
        """

        try:
            with self._session_factory() as session:
                with session.begin():
                    session.add(_to_model(record))
        except SQLAlchemyError as exc:
            raise PriceRecordPersistenceError(
                f"Failed to persist price record symbol={record.symbol!r} date={record.date}."
            ) from exc

    def find_max_by(
        self,
        field: str,
        date_range: DateRange,
        symbol: str | None = None,
    ) -> PriceRecord | None:
        """
        Return the record with the largest ``field`` value in range, if any.
        """

        column = _numeric_column(field)
        stmt = (
            _filtered(select(StockPrice), date_range=date_range, symbol=symbol)
            .order_by(column.desc())
            .limit(1)
        )
        try:
            with self._session_factory() as session:
                model = session.execute(stmt).scalars().first()
        except SQLAlchemyError as exc:
            raise PriceRecordPersistenceError(f"Failed to query maximum {field}.") from exc

        if model is None:
            return None
        return _to_record(model)

    def average(
        self,
        field: str,
        date_range: DateRange,
        symbol: str | None = None,
    ) -> float | None:
        """
        Return the mean ``field`` value in range, or None when nothing matches.
        """

        column = _numeric_column(field)
        stmt = _filtered(select(func.avg(column)), date_range=date_range, symbol=symbol)
        try:
            with self._session_factory() as session:
                value = session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PriceRecordPersistenceError(f"Failed to query average {field}.") from exc

        if value is None:
            return None
        return float(value)


def _numeric_column(field: str) -> object:
    if field not in NUMERIC_FIELDS:
        raise ValueError(f"Unsupported price field: {field!r}.")
    return getattr(StockPrice, field)


def _filtered(stmt, *, date_range: DateRange, symbol: str | None):
    stmt = stmt.where(StockPrice.date >= date_range.start, StockPrice.date <= date_range.end)
    if symbol:
        stmt = stmt.where(StockPrice.symbol == symbol)
    return stmt


def _to_model(record: PriceRecord) -> StockPrice:
    return StockPrice(
        date=record.date,
        symbol=record.symbol,
        series=record.series,
        prev_close=record.prev_close,
        open=record.open,
        high=record.high,
        low=record.low,
        last=record.last,
        close=record.close,
        vwap=record.vwap,
        volume=record.volume,
        turnover=record.turnover,
        trades=record.trades,
        deliverable_volume=record.deliverable_volume,
        percent_deliverable=record.percent_deliverable,
    )


def _to_record(model: StockPrice) -> PriceRecord:
    return PriceRecord(
        date=model.date,
        symbol=model.symbol,
        series=model.series,
        prev_close=model.prev_close,
        open=model.open,
        high=model.high,
        low=model.low,
        last=model.last,
        close=model.close,
        vwap=model.vwap,
        volume=model.volume,
        turnover=model.turnover,
        trades=model.trades,
        deliverable_volume=model.deliverable_volume,
        percent_deliverable=model.percent_deliverable,
    )
