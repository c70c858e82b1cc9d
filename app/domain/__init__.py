"""
app/domain package marker.
"""

from app.domain.price_record import DateRange, IngestionReport, PriceRecord, RowFailure

__all__ = [
    "DateRange",
    "IngestionReport",
    "PriceRecord",
    "RowFailure",
]
