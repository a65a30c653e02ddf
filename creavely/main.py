# creavely/main.py — FastAPI app entry point

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from creavely.config import Settings, get_settings
from creavely.database import Database, DatabaseDisconnectError
from creavely.middleware import install_middleware
from creavely.routers import health, recipes

logger = logging.getLogger(__name__)


def create_app(database: Database | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the application.
    An injected database is used as-is and left open on shutdown;
    otherwise one is connected at startup and closed afterwards.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if database is not None:
            app.state.database = database
            yield
            return

        # A connect failure aborts startup.
        connected = Database.connect(
            settings.mongo_uri,
            settings.database_name,
            timeout_seconds=settings.database_timeout_seconds,
        )
        app.state.database = connected
        try:
            yield
        finally:
            try:
                connected.close(timeout_seconds=settings.database_timeout_seconds)
            except DatabaseDisconnectError:
                logger.exception("Error disconnecting from database")

    app = FastAPI(
        title="creavely",
        description="Recipe catalogue API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if database is not None:
        app.state.database = database

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_: Request, exc: RequestValidationError):
        logger.info("Rejected request body", extra={"errors": exc.errors()})
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body"},
        )

    install_middleware(app, settings)

    # Include routers
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(recipes.router, prefix="/api", tags=["recipes"])

    return app


app = create_app()
