from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from pydantic import BaseModel

from app.api.errors import register_error_handlers


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Runs before any database connection is initialised and raises
    RuntimeError listing every problem so they can be fixed in one restart.
    """

    from db.config import resolve_database_url

    errors: list[str] = []

    try:
        resolve_database_url()
    except (RuntimeError, ValueError) as exc:
        errors.append(str(exc))

    workers_raw = os.getenv("PRICE_INGEST_MAX_WORKERS", "").strip()
    if workers_raw and not (workers_raw.isascii() and workers_raw.isdigit() and int(workers_raw) > 0):
        errors.append(f"PRICE_INGEST_MAX_WORKERS='{workers_raw}' is not a positive integer.")

    if errors:
        raise RuntimeError(
            "Startup validation failed, missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    from app.config import get_log_level

    logging.basicConfig(
        level=getattr(logging, get_log_level(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _ensure_schema() -> None:
    """
    Create any table registered on Base.metadata that the database lacks.

    Existing tables are left untouched; there is no migration step.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401 registers all ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    engine = get_engine()
    missing = set(Base.metadata.tables.keys()) - set(sa_inspect(engine).get_table_names())
    if missing:
        logging.getLogger(__name__).warning(
            "Creating %d missing table(s): %s",
            len(missing),
            ", ".join(sorted(missing)),
        )
        Base.metadata.create_all(engine, checkfirst=True)


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Refuse to serve until the price store is reachable and its tables exist."""
    _check_db()
    logging.getLogger(__name__).info("Database connectivity confirmed")
    _ensure_schema()
    logging.getLogger(__name__).info("Database schema ready")
    yield


class HealthResponse(BaseModel):
    status: str


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Stock Price Ingestion API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    register_error_handlers(application)

    from app.api.routers import price_analytics_router, price_upload_router

    application.include_router(price_upload_router)
    application.include_router(price_analytics_router)

    @application.get("/health")
    def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok")

    return application


app = create_app()
