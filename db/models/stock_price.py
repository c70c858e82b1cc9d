"""
db/models/stock_price.py

One symbol's trading session on one date, as ingested from CSV uploads.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime

from sqlalchemy import BigInteger, Date, DateTime, Float, Index, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base


class StockPrice(Base):
    __tablename__ = "stock_prices"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    symbol: Mapped[str] = mapped_column(String(64), nullable=False)
    series: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="",
        comment="Market series code, e.g. EQ; may be empty",
    )
    prev_close: Mapped[float] = mapped_column(Float, nullable=False)
    open: Mapped[float] = mapped_column(Float, nullable=False)
    high: Mapped[float] = mapped_column(Float, nullable=False)
    low: Mapped[float] = mapped_column(Float, nullable=False)
    last: Mapped[float] = mapped_column(Float, nullable=False)
    close: Mapped[float] = mapped_column(Float, nullable=False)
    vwap: Mapped[float] = mapped_column(Float, nullable=False)
    volume: Mapped[int] = mapped_column(BigInteger, nullable=False)
    turnover: Mapped[float] = mapped_column(Float, nullable=False)
    trades: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deliverable_volume: Mapped[int] = mapped_column(BigInteger, nullable=False)
    percent_deliverable: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_stock_prices_date", "date"),
        Index("ix_stock_prices_symbol_date", "symbol", "date"),
    )
