"""
app/schemas package marker.
"""

from app.schemas.price_analytics import (
    AverageCloseResponse,
    AverageVWAPResponse,
    HighestVolumeRecord,
    HighestVolumeResponse,
)
from app.schemas.price_ingestion import PriceIngestionReportResponse, PriceRowErrorResponse

__all__ = [
    "AverageCloseResponse",
    "AverageVWAPResponse",
    "HighestVolumeRecord",
    "HighestVolumeResponse",
    "PriceIngestionReportResponse",
    "PriceRowErrorResponse",
]
