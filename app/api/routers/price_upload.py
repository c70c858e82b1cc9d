"""
app/api/routers/price_upload.py

Stock price CSV upload endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, UploadFile, status

from app.api.dependencies import get_csv_upload
from app.api.errors import APIRequestError
from app.repositories.upload_staging import UploadStagingError
from app.schemas.price_ingestion import PriceIngestionReportResponse
from app.services.price_ingestion_service import (
    PriceFileDecodeError,
    PriceIngestionService,
    get_price_ingestion_service,
)

router = APIRouter(tags=["ingestion"])


@router.post("/upload", response_model=PriceIngestionReportResponse)
def upload_prices(
    file: UploadFile = Depends(get_csv_upload),
    ingestion_service: PriceIngestionService = Depends(get_price_ingestion_service),
) -> PriceIngestionReportResponse:
    """
    Ingest one CSV file of daily stock prices.

    Rows that fail validation or insertion are reported individually; the
    request still succeeds. Only an unreadable file fails the request.
    """

    try:
        report = ingestion_service.ingest_upload(upload_file=file)
    except PriceFileDecodeError as exc:
        raise APIRequestError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="Unable to read the uploaded CSV file.",
        ) from exc
    except UploadStagingError as exc:
        raise APIRequestError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="Unable to stage the uploaded file.",
        ) from exc
    finally:
        file.file.close()

    return PriceIngestionReportResponse.from_report(report)
