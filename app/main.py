from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import get_job_settings
from app.jobs.registry import JobRegistry
from app.schemas.scrape import HealthResponse


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> str:
    """Run SELECT 1 and return the redacted URL. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text

    from db.config import redact_database_url, resolve_database_url
    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc
    return redact_database_url(resolve_database_url())


def _check_schema() -> None:
    """
    Every table registered on Base.metadata must exist in the database.

    Does NOT auto-migrate; a missing table aborts startup.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        logging.getLogger(__name__).critical(
            "Schema mismatch: %d table(s) missing from the database: %s. "
            "Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


def _build_lifespan(check_database: bool):
    @asynccontextmanager
    async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
        """Check the DB, create the job registry and start the eviction scheduler."""
        log = logging.getLogger(__name__)
        if check_database:
            database_url = _check_db()
            log.info("Database connectivity confirmed url=%s", database_url)
            _check_schema()
            log.info("Database schema validated")

        registry = JobRegistry()
        application.state.job_registry = registry

        from app.scheduler.jobs import build_scheduler

        scheduler = build_scheduler(registry, get_job_settings())
        scheduler.start()
        log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
        try:
            yield
        finally:
            scheduler.shutdown(wait=True)
            log.info("Scheduler shut down")

    return _lifespan


def create_app(*, check_database: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title="Nadlan Deals Scraper API",
        version="1.0.0",
        lifespan=_build_lifespan(check_database),
    )

    from app.api.routers import scrape_router

    application.include_router(scrape_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        registry: JobRegistry = application.state.job_registry
        return HealthResponse(status="ok", jobs=len(registry))

    return application


app = create_app()
