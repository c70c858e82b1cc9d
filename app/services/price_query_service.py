"""
app/services/price_query_service.py

Analytical queries over stored price records: highest volume, average close,
and average VWAP within an inclusive date range.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache

from app.domain.price_record import DateRange, PriceRecord
from app.repositories.price_record_repository import PriceRecordGateway, PriceRecordRepository
from app.validators.price_row_validator import parse_calendar_date

logger = logging.getLogger(__name__)

DATES_REQUIRED_MESSAGE = "Start date and end date are required"
DATES_AND_SYMBOL_REQUIRED_MESSAGE = "Start date, end date and symbol are required"
INVALID_DATE_MESSAGE = "Invalid date format. Use YYYY-MM-DD"


class InvalidQueryError(ValueError):
    """
    Raised when query parameters are missing or malformed.
    """


class MissingQueryParameterError(InvalidQueryError):
    pass


class InvalidQueryDateError(InvalidQueryError):
    pass


class PriceQueryService:
    """
    Parses query parameters and delegates aggregation to the price gateway.
    """

    def __init__(self, *, gateway: PriceRecordGateway) -> None:
        self._gateway = gateway

    def highest_volume(
        self,
        *,
        start_date: str | None,
        end_date: str | None,
        symbol: str | None = None,
    ) -> PriceRecord | None:
        date_range = self._parse_range(start_date, end_date, missing_message=DATES_REQUIRED_MESSAGE)
        return self._gateway.find_max_by("volume", date_range, symbol or None)

    def average_close(
        self,
        *,
        start_date: str | None,
        end_date: str | None,
        symbol: str | None,
    ) -> float:
        """
        Average close for one symbol; the symbol is mandatory for this query.
        """

        if not symbol:
            raise MissingQueryParameterError(DATES_AND_SYMBOL_REQUIRED_MESSAGE)
        date_range = self._parse_range(
            start_date,
            end_date,
            missing_message=DATES_AND_SYMBOL_REQUIRED_MESSAGE,
        )
        return _rounded(self._gateway.average("close", date_range, symbol))

    def average_vwap(
        self,
        *,
        start_date: str | None,
        end_date: str | None,
        symbol: str | None = None,
    ) -> float:
        date_range = self._parse_range(start_date, end_date, missing_message=DATES_REQUIRED_MESSAGE)
        return _rounded(self._gateway.average("vwap", date_range, symbol or None))

    @staticmethod
    def _parse_range(
        start_date: str | None,
        end_date: str | None,
        *,
        missing_message: str,
    ) -> DateRange:
        if not start_date or not end_date:
            raise MissingQueryParameterError(missing_message)

        start = parse_calendar_date(start_date)
        end = parse_calendar_date(end_date)
        if start is None or end is None:
            logger.info("Rejected query date range start=%r end=%r", start_date, end_date)
            raise InvalidQueryDateError(INVALID_DATE_MESSAGE)
        return DateRange(start=start, end=end)


_CENTS = Decimal("0.01")


def _rounded(value: float | None) -> float:
    # No matching rows averages to zero, never to a missing value.
    if value is None:
        return 0.0
    # Ties on the exact binary value round away from zero.
    return float(Decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP))


@lru_cache(maxsize=1)
def get_price_query_service() -> PriceQueryService:
    return PriceQueryService(gateway=PriceRecordRepository())
