"""
Application factory for FastAPI.

Part of IRL-13: HTTP surface

This module provides a factory function for creating FastAPI application instances.
The factory pattern allows for:
- Easy testing with custom settings
- Multiple app instances with different configurations
- Clear separation of app creation from route definitions

Usage:
    from backend.main import create_app
    from backend.settings import Settings

    # Default app (uses get_settings())
    app = create_app()

    # Test app with custom settings
    test_settings = Settings(environment="test", _env_file=None)
    test_app = create_app(settings=test_settings)
"""

import logging
import os
from typing import Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure a FastAPI application instance.

    Args:
        settings: Optional Settings instance. If not provided, uses get_settings()
                  which loads from environment variables.

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    _init_sentry(settings)

    app = FastAPI(
        title="IronLog Progression API",
        description="Local-first training log sync and adaptive progression",
        version="1.0.0",
    )

    _configure_cors(app)
    _include_routers(app)
    _log_storage_config(settings)

    return app


def _init_sentry(settings: Settings) -> None:
    """Initialize Sentry SDK if DSN is configured."""
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,  # 10% of transactions for performance monitoring
            profiles_sample_rate=0.1,
            enable_tracing=True,
        )
        logger.info("Sentry initialized for ironlog-api")


def _configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    trusted_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    # Add production domains from environment if configured
    production_origins = os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
    trusted_origins.extend([origin.strip() for origin in production_origins if origin.strip()])

    app.add_middleware(
        CORSMiddleware,
        allow_origins=trusted_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _include_routers(app: FastAPI) -> None:
    """Include all API routers in the application."""
    from api.routers import (
        analytics_router,
        health_router,
        progression_router,
        state_router,
    )

    # Health router (no prefix - /health at root)
    app.include_router(health_router)

    app.include_router(state_router)
    app.include_router(progression_router)
    app.include_router(analytics_router)


def _log_storage_config(settings: Settings) -> None:
    """Log where state is persisted at startup."""
    logger.info(
        f"Local slots: {settings.local_store_path} ({settings.local_slot_key}); "
        f"remote backend: {settings.remote_backend}"
    )
    if settings.remote_backend == "memory" and settings.is_production:
        logger.warning("Remote mirror is in-memory in production; data will not survive restarts")


# Default app instance for uvicorn
# This allows: uvicorn backend.main:app --reload
app = create_app()
