"""
estate-verify application.

Builds the FastAPI app, wires the verification components during the
lifespan and exposes the health check.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.postgres import run_migrations
from src.api.v1 import router as v1_router
from src.api.wiring import build_components, needs_database
from src.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

tags_metadata = [
    {
        "name": "v1",
        "description": "One-time codes, password reset and sign-in",
    },
]


def _open_pool(settings: Settings) -> ConnectionPool:
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        open=True,
    )
    applied = run_migrations(pool)
    logger.info("PostgreSQL ready: %d migration file(s) applied", applied)
    return pool


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Wire shared services on startup and release them on shutdown.

    A connection pool is opened only when a store or the account
    directory uses PostgreSQL. Shutdown waits for queued deliveries so
    no issued code is dropped mid-send.
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    logger.info(
        "Starting estate-verify: environment=%s stores=%s accounts=%s email=%s",
        settings.environment,
        settings.verification_store_backend,
        settings.account_directory_backend,
        settings.email_provider,
    )

    pool = _open_pool(settings) if needs_database(settings) else None
    components = build_components(settings, pool)

    app.state.pool = pool
    app.state.workflow = components.workflow
    app.state.sign_in_service = components.sign_in_service

    try:
        yield
    finally:
        logger.info("Draining challenge deliveries")
        components.dispatcher.shutdown(wait=True)
        if pool is not None:
            pool.close()
        logger.info("estate-verify stopped")


app = FastAPI(
    title="estate-verify",
    description="One-time-code verification and password reset for the marketplace backend",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

app.include_router(v1_router, prefix="/v1")


@app.get("/health")
async def health(request: Request) -> dict[str, str]:
    """Liveness check; also round-trips the database when one is configured."""
    pool = getattr(request.app.state, "pool", None)
    if pool is not None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")
    return {"status": "healthy"}
