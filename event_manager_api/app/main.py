"""
Main entrypoint for the Event Manager API.

This module assembles the FastAPI application, sets up logging,
middleware and error handlers and includes the versioned routers.
``create_app`` builds and configures the app, which is then
instantiated at module import time as ``app``, e.g.::

    uvicorn event_manager_api.app.main:app --reload

Tests call ``create_app`` with their own ``Settings`` so every test
gets a separate database.
"""

import logging
import traceback
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.router import router as v1_router
from .core.config import Settings, settings as default_settings
from .core.db import Database
from .core.errors import AppError, Internal, ValidationFailed
from .core.logging_config import setup_logging
from .core.validation import field_errors


logger = logging.getLogger(__name__)


def _error_response(request: Request, exc: AppError) -> JSONResponse:
    logger.warning(
        "%s %s %s - %s", exc.status_code, request.method, request.url.path, exc.message
    )
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure onto the ``{"message", "errors"?}`` envelope."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return _error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(request, ValidationFailed(field_errors(exc.errors())))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404 and message == "Not Found":
            message = "Not found"
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("500 %s %s - %s", request.method, request.url.path, exc)
        content = Internal().to_dict()
        if app.state.settings.debug:
            content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(status_code=500, content=content)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    settings : Optional[Settings]
        Configuration to use.  Defaults to the module-level settings
        read from the environment.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    settings = settings or default_settings
    # Initialise logging before anything else so that the start-up
    # steps below can log.
    setup_logging(settings.log_level, settings.log_file or None)

    database = Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Applies migrations; creates the database file on first run.
        database.open()
        logger.info("%s started (environment: %s)", settings.project_name, settings.environment)
        try:
            yield
        finally:
            database.close()
            logger.info("%s stopped", settings.project_name)

    app = FastAPI(title=settings.project_name, version=settings.api_version, lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database

    # Outside production any origin may call the API (local front-end
    # dev servers); in production only the configured ones.
    if settings.is_production:
        cors_kwargs = {"allow_origins": settings.allowed_origins}
    else:
        cors_kwargs = {"allow_origin_regex": ".*"}
    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"],
        expose_headers=["Content-Range", "X-Total-Count"],
        max_age=600,
        **cors_kwargs,
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    register_exception_handlers(app)

    app.include_router(v1_router, prefix=settings.api_prefix)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "status": "OK",
            "service": settings.project_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
        }

    @app.get(f"{settings.api_prefix}/health", tags=["health"])
    async def health() -> dict:
        return {
            "status": "OK",
            "message": f"{settings.project_name} is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
        }

    return app


# Create the application instance at import time so that tools such as
# uvicorn can locate it via ``event_manager_api.app.main:app``.
app = create_app()
