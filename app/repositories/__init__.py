"""
app/repositories package marker.
"""

from app.repositories.price_record_repository import (
    PriceRecordGateway,
    PriceRecordPersistenceError,
    PriceRecordRepository,
)
from app.repositories.upload_staging import StagedUpload, UploadStagingArea, UploadStagingError

__all__ = [
    "PriceRecordGateway",
    "PriceRecordPersistenceError",
    "PriceRecordRepository",
    "StagedUpload",
    "UploadStagingArea",
    "UploadStagingError",
]
