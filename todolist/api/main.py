from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from .. import __version__
from ..log import configure_logging
from ..shared import get_greeting
from .errors import StoreError, register_error_handlers
from .repositories import get_repository
from .routers import todos as todos_router
from .settings import get_settings

logger = logging.getLogger(__name__)

API_NAME = "Todo List API"

openapi_tags = [
    {"name": "health", "description": "Service health and status endpoints."},
    {"name": "todos", "description": "Create, list, update and delete Todo items."},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # Resolve through dependency_overrides so tests can swap the store
    provider = app.dependency_overrides.get(get_repository, get_repository)
    try:
        provider().initialize()
    except StoreError:
        logger.exception("Failed to start server")
        raise
    logger.info("%s ready", API_NAME)
    yield


# PUBLIC_INTERFACE
def create_app() -> FastAPI:
    """Build the FastAPI application with routes, CORS and error handlers."""
    settings = get_settings()

    app = FastAPI(
        title=API_NAME,
        description="Backend API service for a minimal task-list manager.",
        version=__version__,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    # Configure CORS based on settings (CORS_ALLOW_ORIGINS), with '*' fallback
    allow_all = (settings.cors_allow_origins == ["*"]) or (len(settings.cors_allow_origins) == 0)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_allow_origins,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/", include_in_schema=False)
    def root() -> RedirectResponse:
        return RedirectResponse(url="/health")

    # PUBLIC_INTERFACE
    @app.get("/health", summary="Health Check", tags=["health"])
    def health_check() -> dict:
        """
        Health check endpoint.

        Returns:
            A JSON object indicating service health.
        """
        return {"status": "ok", "message": "Todo API is running"}

    # PUBLIC_INTERFACE
    @app.get("/info", summary="API Info", tags=["health"])
    def info() -> dict:
        """Describe the API and return the shared greeting."""
        return {"name": API_NAME, "version": __version__, "message": get_greeting()}

    # The browser client talks to /api/todos; /todos stays available unprefixed
    app.include_router(todos_router.router, prefix="/api")
    app.include_router(todos_router.router, include_in_schema=False)
    return app


app = create_app()


# PUBLIC_INTERFACE
def run() -> None:
    """Console entry point: serve the API with uvicorn on HOST:PORT."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Server running on http://%s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
