"""
app/api/routers/price_analytics.py

Read-only analytical endpoints over stored price records.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from app.api.errors import APIRequestError
from app.repositories.price_record_repository import PriceRecordPersistenceError
from app.schemas.price_analytics import (
    AverageCloseResponse,
    AverageVWAPResponse,
    HighestVolumeRecord,
    HighestVolumeResponse,
)
from app.services.price_query_service import (
    InvalidQueryError,
    PriceQueryService,
    get_price_query_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analytics"])

NO_DATA_MESSAGE = "No data found for the specified criteria"
QUERY_FAILED_MESSAGE = "An error occurred while processing your request"


def _bad_request(exc: InvalidQueryError) -> APIRequestError:
    return APIRequestError(status.HTTP_400_BAD_REQUEST, error=str(exc))


def _query_failed(endpoint: str, exc: PriceRecordPersistenceError) -> APIRequestError:
    logger.error("Error in %s endpoint: %s", endpoint, exc)
    return APIRequestError(status.HTTP_500_INTERNAL_SERVER_ERROR, error=QUERY_FAILED_MESSAGE)


@router.get("/highest_volume", response_model=HighestVolumeResponse)
def highest_volume(
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    symbol: str | None = Query(default=None, description="Optional ticker filter"),
    query_service: PriceQueryService = Depends(get_price_query_service),
) -> HighestVolumeResponse:
    """
    Return the record with the highest traded volume in the date range.
    """

    try:
        record = query_service.highest_volume(
            start_date=start_date,
            end_date=end_date,
            symbol=symbol,
        )
    except InvalidQueryError as exc:
        raise _bad_request(exc) from exc
    except PriceRecordPersistenceError as exc:
        raise _query_failed("/highest_volume", exc) from exc

    if record is None:
        raise APIRequestError(status.HTTP_404_NOT_FOUND, message=NO_DATA_MESSAGE)

    return HighestVolumeResponse(
        highest_volume=HighestVolumeRecord(
            date=record.date,
            symbol=record.symbol,
            volume=record.volume,
        )
    )


@router.get("/average_close", response_model=AverageCloseResponse)
def average_close(
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    symbol: str | None = Query(default=None),
    query_service: PriceQueryService = Depends(get_price_query_service),
) -> AverageCloseResponse:
    try:
        value = query_service.average_close(
            start_date=start_date,
            end_date=end_date,
            symbol=symbol,
        )
    except InvalidQueryError as exc:
        raise _bad_request(exc) from exc
    except PriceRecordPersistenceError as exc:
        raise _query_failed("/average_close", exc) from exc

    return AverageCloseResponse(average_close=value)


@router.get("/average_vwap", response_model=AverageVWAPResponse)
def average_vwap(
    start_date: str | None = Query(default=None),
    end_date: str | None = Query(default=None),
    symbol: str | None = Query(default=None, description="Optional ticker filter"),
    query_service: PriceQueryService = Depends(get_price_query_service),
) -> AverageVWAPResponse:
    try:
        value = query_service.average_vwap(
            start_date=start_date,
            end_date=end_date,
            symbol=symbol,
        )
    except InvalidQueryError as exc:
        raise _bad_request(exc) from exc
    except PriceRecordPersistenceError as exc:
        raise _query_failed("/average_vwap", exc) from exc

    return AverageVWAPResponse(average_vwap=value)
