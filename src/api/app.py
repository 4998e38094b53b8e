# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI Application Factory.

This module provides the main application factory for the assignment API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import uuid4

from fastapi import FastAPI, Request

from src import __version__
from src.api.routes import health
from src.api.v1 import router as v1_router
from src.core.config import get_settings
from src.domains.enrollment import SqlEnrollmentDirectory
from src.domains.notification import AssignmentNotificationHandler
from src.infrastructure.database import (
    close_database,
    create_schema,
    get_sessionmaker,
    init_database,
)
from src.infrastructure.events import get_event_bus
from src.infrastructure.notifications import ConsoleEmailChannel, NotificationService
from src.utils.logging import bind_context, clear_context, get_logger, setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Handles startup and shutdown events for the application.
    Initializes and cleans up:
    - Logging
    - Database connections
    - Event bus and the assignment notification handler

    The event bus is closed before the database so that no handler is
    left running against a disposed connection pool. The notification
    handler is then unsubscribed, so a later startup in the same process
    registers exactly one handler again.

    Args:
        app: The FastAPI application instance.

    Yields:
        None during application runtime.
    """
    settings = get_settings()
    setup_logging(settings)
    get_logger(__name__).info(
        "Starting assignment API",
        environment=settings.environment,
        debug=settings.debug,
        feed_merge_mode=settings.assignment.feed_merge_mode,
    )

    # =========================================================================
    # Startup
    # =========================================================================

    await init_database(settings)
    logger.info("Database connection initialized")

    if settings.is_development:
        await create_schema()
        logger.info("Database schema ensured")

    event_bus = get_event_bus()
    handler = AssignmentNotificationHandler(
        directory=SqlEnrollmentDirectory(
            get_sessionmaker(),
            fallback_name=settings.notification.fallback_sender_name,
        ),
        notification_service=NotificationService(
            channels=[
                ConsoleEmailChannel(
                    from_name=settings.notification.platform_name,
                    from_email=settings.notification.sender_email,
                )
            ]
        ),
        settings=settings.notification,
    )
    handler.register(event_bus)

    yield

    # =========================================================================
    # Shutdown
    # =========================================================================

    try:
        await event_bus.close()
        handler.unregister(event_bus)
        logger.info("Event bus closed")
    except Exception as e:
        logger.warning("Error closing event bus: %s", str(e))

    try:
        await close_database()
        logger.info("Database connection closed")
    except Exception as e:
        logger.warning("Error closing database connection: %s", str(e))

    logger.info("Shutting down assignment API")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    This factory function creates a new FastAPI instance with all
    middleware, routes, and configurations applied.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Shiksha Assignments API",
        description="Homework assignment publishing and notification backend",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # =========================================================================
    # Middleware
    # =========================================================================

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        clear_context()
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        bind_context(request_id=request_id, path=request.url.path)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    # =========================================================================
    # Routes
    # =========================================================================
    app.include_router(health.router, tags=["Health"])
    app.include_router(v1_router)

    return app
