"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) to
improve testability compared to a monolithic main.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api.routes import categories_router, health_router, sessions_router
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations
from app.services.session_registry import SessionRegistry


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    # Sessions live only as long as the process
    app.state.session_registry.clear()


def create_app(registry: SessionRegistry | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        registry: Optional session registry (tests inject their own).

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Menu Manager API",
        description=(
            "Manage a restaurant menu held in memory per session: create, edit "
            "and delete dishes through dialog-style calls, with sanitized text, "
            "validated image URLs and prices, and per-session rate limiting."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        lifespan=_lifespan,
    )
    app.state.session_registry = registry or SessionRegistry()

    # Middleware
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(sessions_router, prefix="/v1")
    app.include_router(categories_router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
