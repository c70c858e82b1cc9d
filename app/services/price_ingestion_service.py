"""
app/services/price_ingestion_service.py

Service layer for stock price CSV ingestion.

Rows are read and validated in file order on the calling thread. Every valid
row becomes one independent insert task on a thread pool; the reader never
waits for an insert to finish unless an admission limit is configured. Once
the file is exhausted, the service waits for every insert to settle and only
then builds the report. Outcome counts are accumulated on the calling thread
alone, from the settled futures.
"""

from __future__ import annotations

import csv
import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from functools import lru_cache
from pathlib import Path
from typing import TextIO

from fastapi import UploadFile

from app.config import get_price_ingestion_settings
from app.domain.price_record import (
    INSERTION_ERROR_REASON,
    FailureStage,
    IngestionReport,
    RowFailure,
)
from app.repositories.price_record_repository import PriceRecordGateway, PriceRecordRepository
from app.repositories.upload_staging import UploadStagingArea
from app.validators.price_row_validator import PriceRowValidator

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PriceFileDecodeError(ValueError):
    """
    Raised when the CSV stream itself is unreadable. Fatal to the whole run.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class PriceIngestionService:
    """
    Coordinates CSV decoding, row validation, and concurrent persistence.
    """

    def __init__(
        self,
        *,
        gateway: PriceRecordGateway,
        max_workers: int = 8,
        max_in_flight: int = 0,
        log_validation_errors: bool = True,
        staging_area: UploadStagingArea | None = None,
        validator: PriceRowValidator | None = None,
    ) -> None:
        self._gateway = gateway
        self._max_workers = max(1, max_workers)
        self._max_in_flight = max(0, max_in_flight)
        self._log_validation_errors = log_validation_errors
        self._staging_area = staging_area or UploadStagingArea()
        self._validator = validator or PriceRowValidator()

    def ingest_upload(self, *, upload_file: UploadFile) -> IngestionReport:
        """
        Stage an uploaded file on disk, ingest it, and remove the staged copy.

        The staged copy is removed on every path out of this method, including
        a decoder failure.
        """

        raw_file = upload_file.file
        raw_file.seek(0)
        with self._staging_area.staged(source=raw_file, file_name=upload_file.filename) as staged:
            logger.info(
                "Ingesting staged upload file_name=%s bytes=%d",
                staged.file_name,
                staged.size_bytes,
            )
            return self.ingest_path(staged.path)

    def ingest_path(self, path: str | Path) -> IngestionReport:
        with open(path, encoding="utf-8-sig", newline="") as handle:
            return self.ingest_stream(handle)

    def ingest_stream(self, text_stream: TextIO) -> IngestionReport:
        """
        Decode a CSV text stream (header row names the fields) and ingest it.
        """

        reader = csv.DictReader(text_stream, strict=True)
        try:
            return self.ingest_rows(_raw_rows(reader))
        except UnicodeDecodeError as exc:
            logger.error("Price CSV decode failed: not UTF-8 (%s)", exc)
            raise PriceFileDecodeError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            logger.error("Price CSV decode failed line=%s: %s", reader.line_num, exc)
            raise PriceFileDecodeError(f"Invalid CSV format: {exc}") from exc

    def ingest_rows(self, rows: Iterable[Mapping[str, str]]) -> IngestionReport:
        """
        Validate rows in order and persist the valid ones concurrently.

        Exceptions raised by ``rows`` propagate after every already
        dispatched insert has settled.
        """

        total_records = 0
        successful_records = 0
        failures: list[RowFailure] = []
        pending: dict[Future[None], tuple[int, dict[str, str]]] = {}
        admission = threading.BoundedSemaphore(self._max_in_flight) if self._max_in_flight else None

        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="price-insert",
        ) as executor:
            for row_number, raw_row in enumerate(rows, start=2):
                total_records += 1
                row = dict(raw_row)
                record, reasons = self._validator.validate(row)
                if record is None:
                    self._record_validation_failure(failures, row_number, row, reasons)
                    continue

                if admission is not None:
                    admission.acquire()
                future = executor.submit(self._gateway.insert, record)
                if admission is not None:
                    future.add_done_callback(lambda _: admission.release())
                pending[future] = (row_number, row)

            for future in as_completed(pending):
                row_number, row = pending[future]
                try:
                    future.result()
                except Exception as exc:  # noqa: BLE001
                    logger.warning(
                        "Price row insert failed row=%s symbol=%r: %s",
                        row_number,
                        row.get("Symbol"),
                        exc,
                    )
                    failures.append(
                        RowFailure(
                            row=row,
                            reasons=(INSERTION_ERROR_REASON,),
                            stage=FailureStage.PERSISTENCE,
                        )
                    )
                else:
                    successful_records += 1

        report = IngestionReport(
            total_records=total_records,
            successful_records=successful_records,
            failed_records=len(failures),
            errors=tuple(failures),
        )
        logger.info(
            "Price ingestion finished total=%d successful=%d failed=%d",
            report.total_records,
            report.successful_records,
            report.failed_records,
        )
        return report

    def _record_validation_failure(
        self,
        failures: list[RowFailure],
        row_number: int,
        row: dict[str, str],
        reasons: list[str],
    ) -> None:
        if self._log_validation_errors:
            logger.warning(
                "Price row rejected row=%s reasons=%s",
                row_number,
                "; ".join(reasons),
            )
        failures.append(RowFailure(row=row, reasons=tuple(reasons)))


def _raw_rows(reader: csv.DictReader) -> Iterator[dict[str, str]]:
    """
    Yield decoder rows as plain column -> cell mappings.

    Cells missing from short lines become empty strings; cells beyond the
    header are dropped.
    """

    for decoded in reader:
        yield {
            column: "" if cell is None else cell
            for column, cell in decoded.items()
            if column is not None
        }


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_price_ingestion_service() -> PriceIngestionService:
    """
    Build and cache the ingestion service with env-driven settings.
    """
    settings = get_price_ingestion_settings()
    return PriceIngestionService(
        gateway=PriceRecordRepository(),
        max_workers=settings.max_workers,
        max_in_flight=settings.max_in_flight,
        log_validation_errors=settings.log_validation_errors,
        staging_area=UploadStagingArea(settings.staging_dir),
    )
