"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures logging, routes, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from psycopg_pool import ConnectionPool

from src.adapters.repository.memory import InMemoryKeyValueStore
from src.adapters.repository.postgres import PostgresKeyValueStore, run_migrations
from src.adapters.smtp.console import ConsoleEmailSender
from src.adapters.smtp.mailer import SmtpEmailSender
from src.api.routes import router
from src.config.settings import Settings, get_settings
from src.domain.exceptions import StorageError
from src.domain.ports import EmailSender

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "sync",
        "description": "Request and activate device api keys, then read and write the account's data",
    },
]


def build_email_sender(settings: Settings) -> EmailSender:
    if settings.email_backend == "smtp":
        return SmtpEmailSender(settings)
    return ConsoleEmailSender()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Opens the key-value store (and runs migrations for PostgreSQL)
    - Creates the email sender and its background executor
    - Closes connection pool and drains pending emails on shutdown
    """
    settings: Settings = app.state.settings

    logger.info("Starting application...")

    pool = None
    if settings.store_backend == "postgres":
        logger.info("Connecting to database...")
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            open=True,
        )

        logger.info("Running database migrations...")
        run_migrations(pool)
        app.state.store = PostgresKeyValueStore(pool)
    else:
        logger.warning("Using in-memory store; data is lost on shutdown")
        app.state.store = InMemoryKeyValueStore()

    app.state.email_sender = build_email_sender(settings)
    app.state.mail_executor = ThreadPoolExecutor(
        max_workers=settings.mail_workers, thread_name_prefix="activation-mail"
    )

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    logger.info("Waiting for queued activation emails...")
    await run_in_threadpool(app.state.mail_executor.shutdown, wait=True)
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create the application.

    Args:
        settings: Explicit configuration; environment settings if omitted
    """
    settings = settings if settings is not None else get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title="padlock-cloud",
        description="Sync backend for an opaque per-account data blob, "
        "gated by email-activated device api keys",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.include_router(router)

    @app.get("/health")
    def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with store validation.

        Returns 200 OK if application and store are healthy.
        """
        try:
            request.app.state.store.ping()
        except StorageError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Database error: {e}",
            ) from None

        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("src.api.main:app", host=settings.host, port=settings.port)
