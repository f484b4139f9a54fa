from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate required environment variables at startup.

    Raises RuntimeError listing every missing or invalid variable so the
    operator can fix all problems in one restart cycle.

    Rules:
    - STORAGE_BACKEND must be one of the supported backends.
    - The postgres backend needs a resolvable database URL.
    """

    from app.config import ALLOWED_STORAGE_BACKENDS
    from db.config import find_database_url, load_env_files

    load_env_files()

    errors: list[str] = []

    backend = os.getenv("STORAGE_BACKEND", "postgres").strip().lower() or "postgres"
    if backend not in ALLOWED_STORAGE_BACKENDS:
        errors.append(
            f"STORAGE_BACKEND='{backend}' is not valid. "
            f"Allowed values: {sorted(ALLOWED_STORAGE_BACKENDS)}."
        )

    if backend == "postgres" and find_database_url() is None:
        errors.append(
            "No database URL configured. Set DATABASE_URL, SUPABASE_DB_URL, "
            "CLOUD_DATABASE_URL or LOCAL_DATABASE_URL, or use STORAGE_BACKEND=memory."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed; missing or invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_database() -> None:
    """
    Confirm the database answers and that the ``air_quality`` table carries
    every mapped column.

    A missing table or column aborts startup; run ``alembic upgrade head``.
    Batches would otherwise all fail as schema mismatches at upload time.
    """
    from sqlalchemy import inspect as sa_inspect
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from db.models import AirQualityReading
    from db.session import get_engine

    table = AirQualityReading.__table__
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            inspector = sa_inspect(connection)
            if not inspector.has_table(table.name):
                missing = sorted(column.name for column in table.columns)
            else:
                live = {column["name"] for column in inspector.get_columns(table.name)}
                missing = sorted(column.name for column in table.columns if column.name not in live)
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc

    if missing:
        logging.getLogger(__name__).critical(
            "Table %s is missing column(s) %s. Run 'alembic upgrade head' and restart.",
            table.name,
            ", ".join(missing),
        )
        raise RuntimeError(f"Schema mismatch: {table.name} is missing {', '.join(missing)}.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot when readings live in Postgres."""
    from app.storage import get_reading_storage

    log = logging.getLogger(__name__)
    storage = get_reading_storage()
    if storage.name == "postgres":
        _verify_database()
        log.info("Database connectivity and air_quality schema confirmed")
    else:
        log.warning("Using %s storage; readings are not persisted across restarts", storage.name)
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="Air Quality Ingest API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import csv_ingestion_router, readings_router
    from app.storage import get_reading_storage

    application.include_router(csv_ingestion_router)
    application.include_router(readings_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok", "storage": get_reading_storage().name}

    return application


app = create_app()
