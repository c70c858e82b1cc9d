"""
app/services package marker.
"""

from app.services.price_ingestion_service import (
    PriceFileDecodeError,
    PriceIngestionService,
    get_price_ingestion_service,
)
from app.services.price_query_service import (
    InvalidQueryError,
    PriceQueryService,
    get_price_query_service,
)

__all__ = [
    "InvalidQueryError",
    "PriceFileDecodeError",
    "PriceIngestionService",
    "PriceQueryService",
    "get_price_ingestion_service",
    "get_price_query_service",
]
