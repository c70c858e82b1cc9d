"""
app/validators/price_row_validator.py

Row-level validation and type parsing for stock price CSV ingestion.

Parsing is deliberately strict and locale independent:

- Dates: ISO 8601 dates or date-times, ``YYYY/MM/DD``, and ``DD-Mon-YYYY`` /
  ``DD Mon YYYY`` with English month abbreviations. Orders where day and
  month cannot be told apart (``04/05/2021``) are rejected.
- Digits are ASCII only in every column.
- Float columns: optional sign, digits with an optional decimal point, and an
  optional exponent. The result must be finite.
- Integer columns: optional ``+``, digits, and an optional all-zero fraction
  (``1200.0``). Negative counts are rejected.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from typing import Any, Mapping

from app.domain.price_record import (
    DATE_COLUMN,
    SERIES_COLUMN,
    SYMBOL_COLUMN,
    PriceRecord,
)

INVALID_DATE_REASON = "Invalid Date format"

# Column name -> (PriceRecord field, numeric kind), in upload header order.
NUMERIC_COLUMNS: tuple[tuple[str, str, str], ...] = (
    ("Prev Close", "prev_close", "float"),
    ("Open", "open", "float"),
    ("High", "high", "float"),
    ("Low", "low", "float"),
    ("Last", "last", "float"),
    ("Close", "close", "float"),
    ("VWAP", "vwap", "float"),
    ("Volume", "volume", "int"),
    ("Turnover", "turnover", "float"),
    ("Trades", "trades", "int"),
    ("Deliverable Volume", "deliverable_volume", "int"),
    ("%Deliverble", "percent_deliverable", "float"),
)

_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)
_COUNT_PATTERN = re.compile(r"\+?(\d+)(?:\.0*)?", re.ASCII)
_SLASHED_DATE_PATTERN = re.compile(r"(\d{4})/(\d{1,2})/(\d{1,2})", re.ASCII)
_NAMED_MONTH_PATTERN = re.compile(r"(\d{1,2})[- ]([A-Za-z]{3})[- ](\d{4})", re.ASCII)

_MONTHS: dict[str, int] = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}


def invalid_number_reason(column: str) -> str:
    return f"Invalid number in {column}"


def parse_calendar_date(value: Any) -> date | None:
    """
    Parse one cell or query value into a calendar date.

    Returns None when the value is blank, malformed, or names a day that does
    not exist (month 13, February 30). Values are never clamped.
    """

    if value is None:
        return None
    raw = str(value).strip()
    if not raw or not raw.isascii():
        return None

    try:
        return date.fromisoformat(raw)
    except ValueError:
        pass

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    if "T" in normalized or " " in normalized.strip():
        try:
            return datetime.fromisoformat(normalized).date()
        except ValueError:
            pass

    slashed = _SLASHED_DATE_PATTERN.fullmatch(raw)
    if slashed:
        year, month, day = (int(part) for part in slashed.groups())
        return _build_date(year, month, day)

    named = _NAMED_MONTH_PATTERN.fullmatch(raw)
    if named:
        month = _MONTHS.get(named.group(2).lower())
        if month is None:
            return None
        return _build_date(int(named.group(3)), month, int(named.group(1)))

    return None


def parse_float_cell(value: Any) -> float | None:
    """
    Parse a price-like cell. Returns None unless the whole cell is a finite number.
    """

    if value is None:
        return None
    raw = str(value).strip()
    if not _FLOAT_PATTERN.fullmatch(raw):
        return None
    parsed = float(raw)
    if not math.isfinite(parsed):
        return None
    return parsed


def parse_count_cell(value: Any) -> int | None:
    """
    Parse a non-negative integer cell (volumes, trade counts).
    """

    if value is None:
        return None
    match = _COUNT_PATTERN.fullmatch(str(value).strip())
    if match is None:
        return None
    return int(match.group(1))


def _build_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


class PriceRowValidator:
    """
    Validates and parses one raw CSV row into a PriceRecord.
    """

    def validate(
        self,
        row: Mapping[str, str | None],
    ) -> tuple[PriceRecord | None, list[str]]:
        """
        Validate one raw row.

        Every column is checked so the caller gets one reason per offending
        column. The record is only returned when there are no reasons.
        """

        reasons: list[str] = []

        trade_date = parse_calendar_date(row.get(DATE_COLUMN))
        if trade_date is None:
            reasons.append(INVALID_DATE_REASON)

        numbers: dict[str, float | int] = {}
        for column, field_name, kind in NUMERIC_COLUMNS:
            cell = row.get(column)
            parsed = parse_count_cell(cell) if kind == "int" else parse_float_cell(cell)
            if parsed is None:
                reasons.append(invalid_number_reason(column))
                continue
            numbers[field_name] = parsed

        if reasons or trade_date is None:
            return None, reasons

        return (
            PriceRecord(
                date=trade_date,
                symbol=self._passthrough(row.get(SYMBOL_COLUMN)),
                series=self._passthrough(row.get(SERIES_COLUMN)),
                **numbers,
            ),
            [],
        )

    @staticmethod
    def _passthrough(value: str | None) -> str:
        if value is None:
            return ""
        return str(value)
