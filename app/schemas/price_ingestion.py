"""
app/schemas/price_ingestion.py

Response schemas for the price upload endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.domain.price_record import FailureStage, IngestionReport, RowFailure


class PriceRowErrorResponse(BaseModel):
    """
    One rejected row: the original cells and why it was rejected.

    Validation failures list every offending column; persistence failures
    carry a single opaque message.
    """

    row: dict[str, str]
    error: str | list[str]


class PriceIngestionReportResponse(BaseModel):
    """
    API response model for one upload run.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_records: int = Field(..., ge=0, alias="totalRecords")
    successful_records: int = Field(..., ge=0, alias="successfulRecords")
    failed_records: int = Field(..., ge=0, alias="failedRecords")
    errors: list[PriceRowErrorResponse] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: IngestionReport) -> PriceIngestionReportResponse:
        return cls(
            total_records=report.total_records,
            successful_records=report.successful_records,
            failed_records=report.failed_records,
            errors=[_row_error(failure) for failure in report.errors],
        )


def _row_error(failure: RowFailure) -> PriceRowErrorResponse:
    if failure.stage == FailureStage.PERSISTENCE and len(failure.reasons) == 1:
        return PriceRowErrorResponse(row=failure.row, error=failure.reasons[0])
    return PriceRowErrorResponse(row=failure.row, error=list(failure.reasons))
