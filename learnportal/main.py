"""
Main application entry point for the LearnPortal assessment engine.

This module builds the FastAPI application, registers the routers and the
error handlers, and wires storage on startup.

Usage:
    - Direct: python -m learnportal.main
    - ASGI server: uvicorn learnportal.main:app
"""

import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from learnportal.api import register_exception_handlers
from learnportal.common.logger import app_logger
from learnportal.config import settings
from learnportal.container import ServiceContainer, build_memory_services, build_sql_services
from learnportal.database.init_db import (
    close_database, create_schema, get_session_factory, initialize_database
)
from learnportal.routers import (
    assignments_router, attempts_router, catalog_router, practice_router, questions_router, stats_router
)

# Setup module logger
logger = app_logger.getChild("main")


def create_app(services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        services: Pre-built services to serve. When omitted, services are
            built on startup for the configured ``STORAGE_BACKEND``.
    """
    app_logger.setLevel(settings.LOG_LEVEL.upper())

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="API for LearnPortal exam assignments, attempts and statistics",
        version="1.0.0"
    )
    app.state.services = services

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Register routers
    for router, tag in (
        (catalog_router, "catalog"),
        (questions_router, "questions"),
        (assignments_router, "assignments"),
        (attempts_router, "attempts"),
        (practice_router, "practice"),
        (stats_router, "stats"),
    ):
        app.include_router(router, prefix=settings.API_V1_STR, tags=[tag])

    @app.on_event("startup")
    async def startup_event():
        """Initialize storage and services on application startup."""
        if app.state.services is not None:
            return
        try:
            if settings.STORAGE_BACKEND == "memory":
                app.state.services = build_memory_services()
            else:
                engine = await initialize_database(
                    database_url=settings.DATABASE_URL,
                    echo=settings.SQL_ECHO,
                    pool_size=settings.DB_POOL_SIZE,
                    max_overflow=settings.DB_MAX_OVERFLOW,
                    pool_timeout=settings.DB_POOL_TIMEOUT
                )
                if settings.DATABASE_URL.startswith("sqlite"):
                    await create_schema(engine)
                app.state.services = build_sql_services(get_session_factory())

            logger.info(f"Application startup complete ({settings.STORAGE_BACKEND} storage)")
        except Exception as e:
            logger.error(f"Failed to initialize application: {str(e)}")
            raise

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup services on application shutdown."""
        try:
            await close_database()
            logger.info("Application shutdown complete")
        except Exception as e:
            logger.error(f"Error during application shutdown: {str(e)}")
            raise

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": f"Welcome to {settings.PROJECT_NAME} API"}

    logger.debug(f"Application initialized with {len(app.routes)} routes")
    return app


app = create_app()

# Entry point for running the application directly
if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", 8000))
    reload_enabled = os.environ.get("RELOAD", "true").lower() == "true"

    logger.info(f"Starting server on {host}:{port} (reload: {reload_enabled})")

    uvicorn.run(
        "learnportal.main:app",
        host=host,
        port=port,
        reload=reload_enabled,
        log_level="info"
    )
