"""
Ingest one local stock price CSV from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from app.config import get_log_level, get_price_ingestion_settings
from app.repositories.price_record_repository import PriceRecordRepository
from app.schemas.price_ingestion import PriceIngestionReportResponse
from app.services.price_ingestion_service import PriceFileDecodeError, PriceIngestionService


def main() -> int:
    parser = argparse.ArgumentParser(description="Ingest a daily stock price CSV file.")
    parser.add_argument("path", help="CSV file with a header row.")
    parser.add_argument(
        "--max-workers",
        type=int,
        default=None,
        help="Override PRICE_INGEST_MAX_WORKERS for this run.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    settings = get_price_ingestion_settings()
    service = PriceIngestionService(
        gateway=PriceRecordRepository(),
        max_workers=args.max_workers or settings.max_workers,
        max_in_flight=settings.max_in_flight,
        log_validation_errors=settings.log_validation_errors,
    )

    try:
        report = service.ingest_path(args.path)
    except PriceFileDecodeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"error: cannot read {args.path}: {exc.strerror or exc}", file=sys.stderr)
        return 1

    payload = PriceIngestionReportResponse.from_report(report).model_dump(by_alias=True)
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
