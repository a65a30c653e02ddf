# creavely/middleware.py — Request logging, CORS and error recovery

import logging
import time

from fastapi import FastAPI, Request, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response

from creavely.config import Settings
from creavely.routers._responses import error_response

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 1),
            },
        )
        return response


class RecoverMiddleware(BaseHTTPMiddleware):
    """Turn any unhandled handler exception into a 500 response."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception(
                "Unhandled error while serving request",
                extra={"method": request.method, "path": request.url.path},
            )
            return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def install_middleware(app: FastAPI, settings: Settings) -> None:
    # Last added runs first: logging -> CORS -> recover -> handler.
    app.add_middleware(RecoverMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
